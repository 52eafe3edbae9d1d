"""Static content sources and the topic catalog."""
import json
import logging
from pathlib import Path
from urllib.parse import urljoin, urlparse

import requests
from pydantic import ValidationError

from grammar_practice.models import Catalog

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_DIR = Path(__file__).parent / "content"
CATALOG_REF = "config.json"

DEFAULT_CATALOG_DATA = {
    "topics": [
        {"id": "tenses", "name": "Tenses", "file": "tenses.json", "weightage": 25},
        {"id": "modals", "name": "Modals", "file": "modals.json", "weightage": 10},
        {"id": "voice", "name": "Active & Passive Voice", "file": "voice.json", "weightage": 15},
        {"id": "reportedspeech", "name": "Reported Speech", "file": "reportedspeech.json", "weightage": 15},
        {"id": "subjectverb", "name": "Subject-Verb Agreement", "file": "subjectverb.json", "weightage": 10},
        {"id": "prepositions", "name": "Prepositions", "file": "prepositions.json", "weightage": 8},
        {"id": "determinersarticles", "name": "Determiners & Articles", "file": "determinersarticles.json", "weightage": 7},
        {"id": "conjunctions", "name": "Conjunctions", "file": "conjunctions.json", "weightage": 5},
        {"id": "reordering", "name": "Sentence reordering", "file": "reordering.json", "weightage": 5},
    ],
    "testConfigs": {
        "fullTest": {
            "distribution": {
                "tenses": 3,
                "modals": 1,
                "voice": 2,
                "reportedspeech": 2,
                "subjectverb": 1,
                "prepositions": 1,
                "conjunctions": 1,
                "determinersarticles": 1,
                "reordering": 1,
            },
        },
    },
}

DEFAULT_CATALOG = Catalog.model_validate(DEFAULT_CATALOG_DATA)


class ContentLoadError(Exception):
    """A content document could not be fetched or parsed."""


class ContentSource:
    """Read-only access to static JSON documents addressed by a relative ref."""

    def fetch_json(self, ref: str):
        raise NotImplementedError


class DirectoryContentSource(ContentSource):
    def __init__(self, root: str | Path):
        self.root = Path(root)

    def fetch_json(self, ref: str):
        path = self.root / ref
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ContentLoadError(f"{path}: {e}") from e

    def __repr__(self):
        return f"DirectoryContentSource({str(self.root)!r})"


class HttpContentSource(ContentSource):
    def __init__(self, base_url: str, timeout: float = 10):
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout

    def fetch_json(self, ref: str):
        url = urljoin(self.base_url, ref)
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            raise ContentLoadError(f"{url}: {e}") from e

    def __repr__(self):
        return f"HttpContentSource({self.base_url!r})"


def open_content_source(location: str | Path | None = None) -> ContentSource:
    """Pick a source for a directory path or an http(s) base URL."""
    if location is None:
        return DirectoryContentSource(DEFAULT_CONTENT_DIR)
    if urlparse(str(location)).scheme in ("http", "https"):
        return HttpContentSource(str(location))
    return DirectoryContentSource(location)


def load_catalog(source: ContentSource, ref: str = CATALOG_REF) -> Catalog:
    """Load the topic catalog, falling back to the built-in default."""
    try:
        catalog = Catalog.model_validate(source.fetch_json(ref))
    except ContentLoadError as e:
        logger.warning("Could not load catalog, using default: %s", e)
        return DEFAULT_CATALOG
    except ValidationError as e:
        logger.warning("Invalid catalog %s in %r, using default: %s", ref, source, e)
        return DEFAULT_CATALOG
    logger.debug("Loaded catalog with %d topics from %r", len(catalog.topics), source)
    return catalog
