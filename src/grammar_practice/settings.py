"""User preferences for the front end, stored as one JSON blob."""
import json
import logging
from dataclasses import asdict, dataclass, fields

from grammar_practice.db import get_value, set_value

logger = logging.getLogger(__name__)

SETTINGS_KEY = "settings"


@dataclass
class Settings:
    shuffle_questions: bool = True
    shuffle_options: bool = True
    show_explanations: bool = True
    auto_submit: bool = False


def load_settings(db_path: str) -> Settings:
    raw = get_value(db_path, SETTINGS_KEY)
    if not raw:
        return Settings()
    try:
        data = json.loads(raw)
    except ValueError as e:
        logger.warning("Stored settings are corrupt, using defaults: %s", e)
        return Settings()
    if not isinstance(data, dict):
        logger.warning("Stored settings are not an object, using defaults")
        return Settings()
    known = {f.name for f in fields(Settings)}
    return Settings(**{k: v for k, v in data.items() if k in known and isinstance(v, bool)})


def save_settings(db_path: str, settings: Settings) -> None:
    set_value(db_path, SETTINGS_KEY, json.dumps(asdict(settings)))
