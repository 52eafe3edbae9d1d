"""Test assembly: weighted, randomized question selection across topics."""
import logging
import random

from grammar_practice.models import Catalog, Difficulty, Question
from grammar_practice.questions import QuestionStore
from grammar_practice.stats import round_half_up

logger = logging.getLogger(__name__)

ALL = "all"

_default_rng = random.Random()


def filter_by_difficulty(questions: list[Question], difficulty: str) -> list[Question]:
    if difficulty == ALL:
        return list(questions)
    level = Difficulty(difficulty)
    return [q for q in questions if q.difficulty == level]


def sample_questions(pool: list[Question], count: int, rng: random.Random = None) -> list[Question]:
    """Pick ``count`` questions without replacement.

    A pool no larger than ``count`` is returned whole, in its original order.
    """
    rng = rng or _default_rng
    if count <= 0:
        return []
    if len(pool) <= count:
        return list(pool)
    return rng.sample(pool, count)


def shuffle_options(question: Question, rng: random.Random = None) -> Question:
    """Return a copy of the question with its options permuted.

    The correct answer is held as the option text, so it stays valid.
    """
    rng = rng or _default_rng
    options = list(question.options)
    rng.shuffle(options)
    return question.model_copy(update={"options": options})


def scaled_counts(distribution: dict[str, int], target_count: int) -> dict[str, int]:
    """Scale a full-test distribution to the requested number of questions."""
    total = sum(distribution.values())
    if total == 0:
        return {}
    factor = target_count / total
    return {
        topic_id: max(1, round_half_up(count * factor))
        for topic_id, count in distribution.items()
    }


def _assemble_mixed(catalog, store, difficulty, target_count, rng) -> list[Question]:
    distribution = catalog.distribution
    counts = scaled_counts(distribution, target_count)
    if not counts:
        logger.warning("Full-test distribution is empty, no questions selected")
        return []

    selected: list[Question] = []
    for topic_id, count in counts.items():
        if not catalog.has_topic(topic_id):
            logger.warning("Topic %s not found in catalog, skipping", topic_id)
            continue
        topic_questions = store.load(topic_id)
        if not topic_questions:
            continue
        filtered = filter_by_difficulty(topic_questions, difficulty)
        selected.extend(sample_questions(filtered, count, rng))

    if len(selected) > target_count:
        selected = sample_questions(selected, target_count, rng)
    elif len(selected) < target_count:
        # Top-up draws from every distribution topic and may repeat questions
        # already picked above.
        pool: list[Question] = []
        for topic_id in distribution:
            if catalog.has_topic(topic_id):
                pool.extend(store.load(topic_id))
        extra = sample_questions(filter_by_difficulty(pool, difficulty), target_count - len(selected), rng)
        if extra:
            logger.debug("Topped up mixed test with %d questions", len(extra))
        selected.extend(extra)
    return selected


def assemble(
    catalog: Catalog,
    store: QuestionStore,
    scope: str = ALL,
    difficulty: str = ALL,
    target_count: int = 10,
    *,
    shuffle_questions: bool = False,
    shuffle_option_order: bool = False,
    rng: random.Random = None,
) -> list[Question]:
    """Build the question list for a test.

    Args:
        scope: "all" for a mixed test following the full-test distribution,
            or a single topic id.
        difficulty: "all" or one of easy/medium/hard; applied per topic
            before sampling.
        target_count: requested number of questions. Single-topic tests
            return fewer when the topic runs short.
        shuffle_questions: permute the final question order.
        shuffle_option_order: permute each question's options (on a copy).
        rng: random source; pass a seeded ``random.Random`` for repeatable
            selection.
    """
    rng = rng or _default_rng
    if difficulty != ALL:
        Difficulty(difficulty)

    if scope == ALL:
        questions = _assemble_mixed(catalog, store, difficulty, target_count, rng)
    else:
        filtered = filter_by_difficulty(store.load(scope), difficulty)
        questions = sample_questions(filtered, min(target_count, len(filtered)), rng)

    if shuffle_questions:
        rng.shuffle(questions)
    if shuffle_option_order:
        questions = [shuffle_options(q, rng) for q in questions]
    logger.debug("Assembled %d questions (scope=%s, difficulty=%s)", len(questions), scope, difficulty)
    return questions


def topic_questions(catalog: Catalog, store: QuestionStore, topic_id: str) -> list[Question]:
    """Every question of one topic, in file order, for browsing with answers."""
    if not catalog.has_topic(topic_id):
        logger.warning("Topic %s not found in catalog", topic_id)
        return []
    return list(store.load(topic_id))
