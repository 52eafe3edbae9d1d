import json
import logging

from grammar_practice.content import DirectoryContentSource
from grammar_practice.questions import QuestionStore


class CountingSource(DirectoryContentSource):
    def __init__(self, root):
        super().__init__(root)
        self.calls = []

    def fetch_json(self, ref):
        self.calls.append(ref)
        return super().fetch_json(ref)


def test_load_stamps_topic_id(store):
    questions = store.load("modals")
    assert len(questions) == 4
    assert all(q.topic_id == "modals" for q in questions)


def test_load_caches_without_refetching(catalog, content_dir):
    source = CountingSource(content_dir)
    store = QuestionStore(catalog, source)
    first = store.load("tenses")
    second = store.load("tenses")
    assert first is second
    assert source.calls == ["tenses.json"]
    assert store.is_cached("tenses")


def test_reload_drops_cache(catalog, content_dir):
    source = CountingSource(content_dir)
    store = QuestionStore(catalog, source)
    store.load("tenses")
    store.reload()
    assert not store.is_cached("tenses")
    store.load("tenses")
    assert source.calls == ["tenses.json", "tenses.json"]


def test_unknown_topic_returns_empty(store, caplog):
    with caplog.at_level(logging.WARNING):
        assert store.load("nosuchtopic") == []
    assert "not found in catalog" in caplog.text


def test_unparseable_topic_returns_empty(store, caplog):
    with caplog.at_level(logging.WARNING):
        assert store.load("broken") == []
    assert "Error loading topic broken" in caplog.text
    assert not store.is_cached("broken")


def test_missing_topic_file_returns_empty(store):
    assert store.load("absent") == []
    assert not store.is_cached("absent")


def test_failed_load_is_retried(catalog, content_dir):
    source = CountingSource(content_dir)
    store = QuestionStore(catalog, source)
    assert store.load("absent") == []
    (content_dir / "absent.json").write_text(json.dumps([
        {"id": 1, "question": "Now here", "options": ["a", "b"], "answer": "a"},
    ]))
    assert len(store.load("absent")) == 1
    assert source.calls == ["absent.json", "absent.json"]


def test_invalid_entries_are_skipped(catalog, content_dir, caplog):
    (content_dir / "tenses.json").write_text(json.dumps([
        {"id": 1, "question": "Good", "options": ["a", "b"], "answer": "a"},
        {"id": 2, "question": "Answer not an option", "options": ["a", "b"], "answer": "c"},
        "not an object",
        {"id": 4, "question": "Also good", "options": ["x", "y", "z"], "answer": "z"},
    ]))
    store = QuestionStore(catalog, DirectoryContentSource(content_dir))
    with caplog.at_level(logging.WARNING):
        questions = store.load("tenses")
    assert [q.id for q in questions] == [1, 4]
    assert "Skipping" in caplog.text


def test_null_marks_entry_is_kept(catalog, content_dir):
    (content_dir / "tenses.json").write_text(json.dumps([
        {"id": 1, "question": "q", "options": ["a", "b"], "answer": "a", "marks": None},
    ]))
    store = QuestionStore(catalog, DirectoryContentSource(content_dir))
    questions = store.load("tenses")
    assert [(q.id, q.marks) for q in questions] == [(1, 1)]


def test_non_list_document_returns_empty(catalog, content_dir):
    (content_dir / "voice.json").write_text(json.dumps({"questions": []}))
    store = QuestionStore(catalog, DirectoryContentSource(content_dir))
    assert store.load("voice") == []


def test_index_keys_by_topic_and_id(store):
    lookup = store.index()
    # 8 tenses + 4 modals + 5 voice; broken/absent contribute nothing
    assert len(lookup) == 17
    assert lookup[("tenses", 1)].prompt == "tense question 1"
    assert lookup[("modals", 1)].prompt == "modal question 1"


def test_index_limited_topics(store):
    lookup = store.index(["voice"])
    assert set(lookup) == {("voice", i) for i in range(1, 6)}


def test_index_warns_on_duplicate_ids(catalog, content_dir, caplog):
    (content_dir / "voice.json").write_text(json.dumps([
        {"id": 1, "question": "First", "options": ["a", "b"], "answer": "a"},
        {"id": 1, "question": "Second", "options": ["a", "b"], "answer": "b"},
    ]))
    store = QuestionStore(catalog, DirectoryContentSource(content_dir))
    with caplog.at_level(logging.WARNING):
        lookup = store.index(["voice"])
    assert lookup[("voice", 1)].prompt == "First"
    assert "Duplicate question id" in caplog.text
