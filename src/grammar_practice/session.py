"""A single test attempt: questions, answers and scoring."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from grammar_practice.models import HistoryRecord, Question
from grammar_practice.stats import TopicStats, accuracy, breakdown


@dataclass
class Score:
    earned: int
    total: int

    @property
    def percentage(self) -> int:
        return accuracy(self.earned, self.total)

    @property
    def is_perfect(self) -> bool:
        return self.total > 0 and self.earned == self.total


@dataclass
class TestSession:
    __test__ = False

    questions: list[Question]
    answers: list[Optional[str]] = field(default_factory=list)
    scope: str = "all"

    @classmethod
    def start(cls, questions: list[Question], scope: str = "all") -> "TestSession":
        return cls(questions=list(questions), answers=[None] * len(questions), scope=scope)

    def __len__(self) -> int:
        return len(self.questions)

    def record_answer(self, index: int, value: str) -> bool:
        """Store an answer; returns False (and changes nothing) if it is not valid."""
        if not 0 <= index < len(self.questions):
            return False
        if value not in self.questions[index].options:
            return False
        self.answers[index] = value
        return True

    def select_option(self, index: int, option_index: int) -> bool:
        if not 0 <= index < len(self.questions):
            return False
        options = self.questions[index].options
        if not 0 <= option_index < len(options):
            return False
        return self.record_answer(index, options[option_index])

    @property
    def is_complete(self) -> bool:
        return all(answer is not None for answer in self.answers)

    @property
    def answered_count(self) -> int:
        return sum(1 for answer in self.answers if answer is not None)

    def is_correct(self, index: int) -> bool:
        return self.answers[index] == self.questions[index].correct_answer

    def score(self) -> Score:
        total = sum(q.marks for q in self.questions)
        earned = sum(q.marks for i, q in enumerate(self.questions) if self.is_correct(i))
        return Score(earned=earned, total=total)

    def breakdown(self) -> dict[str, TopicStats]:
        return breakdown(
            [q.topic_id for q in self.questions],
            self.answers,
            [q.correct_answer for q in self.questions],
        )

    def to_record(self, now: datetime = None) -> HistoryRecord:
        """Snapshot the session for the test history."""
        now = now or datetime.now()
        score = self.score()
        return HistoryRecord(
            id=int(now.timestamp() * 1000),
            date=now.date().isoformat(),
            topic_scope=self.scope,
            score=score.earned,
            total_marks=score.total,
            question_ids=[q.id for q in self.questions],
            question_topics=[q.topic_id for q in self.questions],
            user_answers=list(self.answers),
            correct_answers=[q.correct_answer for q in self.questions],
        )
