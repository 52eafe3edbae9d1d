"""Test history: capped persistence, lookup and replay of past attempts."""
import json
import logging
from dataclasses import dataclass, field
from enum import Enum

from pydantic import ValidationError

from grammar_practice.db import get_value, set_value
from grammar_practice.models import HistoryRecord, Question, QuestionKey
from grammar_practice.questions import QuestionStore

logger = logging.getLogger(__name__)

HISTORY_KEY = "test_history"
HISTORY_LIMIT = 50

REVIEW = "review"
RETAKE = "retake"


class HistoryNotFoundError(LookupError):
    """No history record at the requested position."""


def _save(db_path: str, records: list[HistoryRecord]) -> None:
    set_value(db_path, HISTORY_KEY, json.dumps([r.to_json_dict() for r in records]))


def list_records(db_path: str) -> list[HistoryRecord]:
    """All stored records, most recent first."""
    raw = get_value(db_path, HISTORY_KEY)
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except ValueError as e:
        logger.warning("Stored test history is corrupt, ignoring it: %s", e)
        return []
    if not isinstance(data, list):
        logger.warning("Stored test history is not a list, ignoring it")
        return []

    records = []
    for position, item in enumerate(data):
        try:
            records.append(HistoryRecord.model_validate(item))
        except ValidationError as e:
            logger.warning("Dropping invalid history record %d: %s", position, e)
    return records


def append_record(db_path: str, record: HistoryRecord) -> list[HistoryRecord]:
    """Add a record at the front, keeping only the newest HISTORY_LIMIT."""
    records = [record] + list_records(db_path)
    records = records[:HISTORY_LIMIT]
    _save(db_path, records)
    return records


def get_record(db_path: str, index: int) -> HistoryRecord:
    records = list_records(db_path)
    if not 0 <= index < len(records):
        raise HistoryNotFoundError(f"No test history record at position {index}")
    return records[index]


def clear_history(db_path: str) -> None:
    _save(db_path, [])


class ReplayStatus(str, Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"
    INCOMPATIBLE = "incompatible"


@dataclass
class Replay:
    status: ReplayStatus
    questions: list[Question] = field(default_factory=list)
    expected: int = 0
    missing: list[QuestionKey] = field(default_factory=list)

    @property
    def resolved(self) -> int:
        return self.expected - len(self.missing)

    @property
    def is_complete(self) -> bool:
        return self.status == ReplayStatus.COMPLETE


def missing_question(topic_id, question_id, correct_answer) -> Question:
    """Stand-in for a question that can no longer be loaded."""
    return Question.model_construct(
        id=question_id,
        topic_id=topic_id,
        prompt=f"[Data missing for Q{question_id}]",
        options=[],
        correct_answer=correct_answer,
        explanation="Data could not be loaded.",
        marks=1,
        difficulty=None,
        question_type=None,
        year_asked=None,
    )


def reconstruct(record: HistoryRecord, store: QuestionStore, mode: str = REVIEW) -> Replay:
    """Rebuild the question list of a past test, in its original order.

    Questions are matched on (topic, id); ids repeat across topics. In review
    mode a question that can't be found becomes a placeholder carrying the
    stored answer. In retake mode it is left out and the replay is PARTIAL.
    Records saved without question topics come back INCOMPATIBLE.
    """
    if mode not in (REVIEW, RETAKE):
        raise ValueError(f"Unknown replay mode: {mode}")
    expected = len(record.question_ids)
    if not record.is_replayable:
        logger.warning("History record %s has no question topics and cannot be replayed", record.id)
        return Replay(status=ReplayStatus.INCOMPATIBLE, expected=expected)

    lookup = store.index()
    questions: list[Question] = []
    missing: list[QuestionKey] = []
    for i, question_id in enumerate(record.question_ids):
        topic_id = record.question_topics[i] if i < len(record.question_topics) else None
        key = (topic_id, question_id)
        question = lookup.get(key)
        if question is not None:
            questions.append(question)
            continue
        logger.warning("Question not found: %s_%s", topic_id, question_id)
        missing.append(key)
        if mode == REVIEW:
            correct = record.correct_answers[i] if i < len(record.correct_answers) else None
            questions.append(missing_question(topic_id, question_id, correct))

    status = ReplayStatus.PARTIAL if missing else ReplayStatus.COMPLETE
    return Replay(status=status, questions=questions, expected=expected, missing=missing)
