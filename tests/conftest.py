import json
import random

import pytest

from grammar_practice.content import DirectoryContentSource, load_catalog
from grammar_practice.models import Catalog
from grammar_practice.questions import QuestionStore


def make_question(qid, word, difficulty="easy", marks=1):
    return {
        "id": qid,
        "question": f"{word} question {qid}",
        "options": [f"{word}-{qid}-a", f"{word}-{qid}-b", f"{word}-{qid}-c", f"{word}-{qid}-d"],
        "answer": f"{word}-{qid}-b",
        "explanation": f"Because {word} {qid}.",
        "marks": marks,
        "difficulty": difficulty,
        "question_type": "Multiple Choice",
    }


TOPIC_QUESTIONS = {
    # 8 questions: 4 easy, 2 medium, 2 hard
    "tenses": [make_question(i, "tense", d) for i, d in enumerate(
        ["easy", "easy", "easy", "easy", "medium", "medium", "hard", "hard"], start=1)],
    # ids 1-4 collide with tenses on purpose
    "modals": [make_question(i, "modal", d) for i, d in enumerate(
        ["easy", "medium", "hard", "hard"], start=1)],
    # 5 questions, only 2 hard
    "voice": [make_question(i, "voice", d, marks=2 if i == 1 else 1) for i, d in enumerate(
        ["hard", "easy", "easy", "hard", "medium"], start=1)],
}

CATALOG_DATA = {
    "topics": [
        {"id": "tenses", "name": "Tenses", "file": "tenses.json", "weightage": 25},
        {"id": "modals", "name": "Modals", "file": "modals.json", "weightage": 10},
        {"id": "voice", "name": "Active & Passive Voice", "file": "voice.json", "weightage": 15},
        {"id": "broken", "name": "Broken Topic", "file": "broken.json", "weightage": 1},
        {"id": "absent", "name": "Absent Topic", "file": "absent.json", "weightage": 1},
    ],
    "testConfigs": {"fullTest": {"distribution": {"tenses": 3, "modals": 1}}},
}


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_practice.db")
    return db_path


@pytest.fixture
def content_dir(tmp_path):
    """A content tree with three good topics, one unparseable and one missing file."""
    root = tmp_path / "content"
    root.mkdir()
    (root / "config.json").write_text(json.dumps(CATALOG_DATA))
    for topic_id, questions in TOPIC_QUESTIONS.items():
        (root / f"{topic_id}.json").write_text(json.dumps(questions))
    (root / "broken.json").write_text("{not json")
    return root


@pytest.fixture
def source(content_dir):
    return DirectoryContentSource(content_dir)


@pytest.fixture
def catalog(source):
    return load_catalog(source)


@pytest.fixture
def store(catalog, source):
    return QuestionStore(catalog, source)


@pytest.fixture
def make_catalog():
    """Build a catalog with the fixture topics and a custom distribution."""
    def _make(distribution):
        data = {**CATALOG_DATA, "testConfigs": {"fullTest": {"distribution": distribution}}}
        return Catalog.model_validate(data)
    return _make


@pytest.fixture
def rng():
    return random.Random(1234)
