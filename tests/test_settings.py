import json

from grammar_practice.db import init_db, set_value
from grammar_practice.settings import SETTINGS_KEY, Settings, load_settings, save_settings


def test_defaults_when_nothing_stored(tmp_db):
    init_db(tmp_db)
    s = load_settings(tmp_db)
    assert s == Settings()
    assert s.shuffle_questions is True
    assert s.shuffle_options is True
    assert s.show_explanations is True
    assert s.auto_submit is False


def test_save_and_load(tmp_db):
    init_db(tmp_db)
    save_settings(tmp_db, Settings(shuffle_questions=False, auto_submit=True))
    s = load_settings(tmp_db)
    assert s.shuffle_questions is False
    assert s.auto_submit is True
    assert s.shuffle_options is True


def test_partial_blob_merges_over_defaults(tmp_db):
    init_db(tmp_db)
    # Older blobs carried display-only keys like compactMode
    set_value(tmp_db, SETTINGS_KEY, json.dumps({"show_explanations": False, "compactMode": True}))
    s = load_settings(tmp_db)
    assert s.show_explanations is False
    assert s.shuffle_questions is True


def test_corrupt_blob_falls_back(tmp_db):
    init_db(tmp_db)
    set_value(tmp_db, SETTINGS_KEY, "{oops")
    assert load_settings(tmp_db) == Settings()
    set_value(tmp_db, SETTINGS_KEY, "[1, 2]")
    assert load_settings(tmp_db) == Settings()


def test_non_boolean_values_keep_defaults(tmp_db):
    init_db(tmp_db)
    set_value(tmp_db, SETTINGS_KEY, json.dumps({"shuffle_questions": "false", "auto_submit": 1, "show_explanations": False}))
    s = load_settings(tmp_db)
    assert s.shuffle_questions is True
    assert s.auto_submit is False
    assert s.show_explanations is False
