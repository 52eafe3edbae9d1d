"""Application state shared by the front end and the engine."""
from dataclasses import dataclass, field
from typing import Optional

from grammar_practice.content import load_catalog, open_content_source
from grammar_practice.db import DEFAULT_DB_PATH, init_db
from grammar_practice.models import Catalog
from grammar_practice.questions import QuestionStore
from grammar_practice.session import TestSession
from grammar_practice.settings import Settings, load_settings


@dataclass
class AppState:
    db_path: str
    catalog: Catalog
    store: QuestionStore
    settings: Settings = field(default_factory=Settings)
    session: Optional[TestSession] = None


def create_app_state(db_path: str = DEFAULT_DB_PATH, content_location=None) -> AppState:
    init_db(db_path)
    source = open_content_source(content_location)
    catalog = load_catalog(source)
    return AppState(
        db_path=db_path,
        catalog=catalog,
        store=QuestionStore(catalog, source),
        settings=load_settings(db_path),
    )
