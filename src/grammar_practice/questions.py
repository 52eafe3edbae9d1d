"""Per-topic question loading and caching."""
import logging

from pydantic import ValidationError

from grammar_practice.content import ContentLoadError, ContentSource
from grammar_practice.models import Catalog, Question, QuestionKey

logger = logging.getLogger(__name__)


class QuestionStore:
    """Loads each topic's questions once and serves them from cache afterwards.

    Failures never raise: an unknown topic or a broken document yields an
    empty list and a warning, so a mixed test can still be assembled from
    the topics that did load. Failed loads are not cached.
    """

    def __init__(self, catalog: Catalog, source: ContentSource):
        self.catalog = catalog
        self.source = source
        self._cache: dict[str, list[Question]] = {}

    def is_cached(self, topic_id: str) -> bool:
        return topic_id in self._cache

    def reload(self) -> None:
        self._cache.clear()

    def load(self, topic_id: str) -> list[Question]:
        if topic_id in self._cache:
            return self._cache[topic_id]

        topic = self.catalog.get_topic(topic_id)
        if topic is None:
            logger.warning("Topic %s not found in catalog", topic_id)
            return []

        try:
            data = self.source.fetch_json(topic.content_ref)
        except ContentLoadError as e:
            logger.warning("Error loading topic %s: %s", topic_id, e)
            return []
        if not isinstance(data, list):
            logger.warning("Error loading topic %s: expected a list of questions", topic_id)
            return []

        questions = []
        for position, raw in enumerate(data):
            if not isinstance(raw, dict):
                logger.warning("Skipping entry %d in topic %s: not an object", position, topic_id)
                continue
            try:
                question = Question.model_validate({**raw, "topic": topic_id})
            except ValidationError as e:
                logger.warning("Skipping invalid question %d in topic %s: %s", position, topic_id, e)
                continue
            questions.append(question)

        self._cache[topic_id] = questions
        logger.debug("Loaded %d questions for topic %s", len(questions), topic_id)
        return questions

    def index(self, topic_ids=None) -> dict[QuestionKey, Question]:
        """Map every loaded question by its (topic_id, id) key."""
        if topic_ids is None:
            topic_ids = [t.id for t in self.catalog.topics]
        lookup: dict[QuestionKey, Question] = {}
        for topic_id in topic_ids:
            for question in self.load(topic_id):
                if question.key in lookup:
                    logger.warning("Duplicate question id %s in topic %s", question.id, topic_id)
                    continue
                lookup[question.key] = question
        return lookup
