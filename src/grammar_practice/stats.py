"""Per-topic score breakdowns and history statistics."""
import math
from dataclasses import dataclass

UNKNOWN_TOPIC = "unknown"


@dataclass
class TopicStats:
    correct: int = 0
    total: int = 0

    @property
    def accuracy(self) -> int:
        return accuracy(self.correct, self.total)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def accuracy(correct: int, total: int) -> int:
    """Percentage correct, rounded half up; 0 when there is nothing to score."""
    if total == 0:
        return 0
    return round_half_up(100 * correct / total)


def accuracy_band(pct: float) -> str:
    if pct >= 80:
        return "good"
    elif pct >= 50:
        return "average"
    return "poor"


def breakdown(question_topics, user_answers, correct_answers) -> dict[str, TopicStats]:
    """Count correct answers per topic.

    Each position is one question. Positions without a topic are grouped
    under ``"unknown"``. Live sessions and stored history records both go
    through here, so results and reviews always agree.
    """
    stats: dict[str, TopicStats] = {}
    for i, topic_id in enumerate(question_topics):
        bucket = stats.setdefault(topic_id or UNKNOWN_TOPIC, TopicStats())
        bucket.total += 1
        user = user_answers[i] if i < len(user_answers) else None
        correct = correct_answers[i] if i < len(correct_answers) else None
        if user is not None and user == correct:
            bucket.correct += 1
    return stats


def paper_breakdown(questions) -> dict[str, int]:
    """Number of questions per topic in an assembled paper."""
    counts: dict[str, int] = {}
    for q in questions:
        key = q.topic_id or UNKNOWN_TOPIC
        counts[key] = counts.get(key, 0) + 1
    return counts


def record_accuracy(record) -> int:
    correct = sum(
        1 for user, right in zip(record.user_answers, record.correct_answers)
        if user is not None and user == right
    )
    return accuracy(correct, len(record.question_ids))


def average_score(records) -> int:
    """Mean of score/total percentages across records."""
    percentages = [100 * r.score / r.total_marks for r in records if r.total_marks]
    if not percentages:
        return 0
    return round_half_up(sum(percentages) / len(percentages))


def topic_totals(records) -> dict[str, TopicStats]:
    """Sum per-topic breakdowns over every replayable record."""
    totals: dict[str, TopicStats] = {}
    for record in records:
        if not record.is_replayable:
            continue
        per_topic = breakdown(record.question_topics, record.user_answers, record.correct_answers)
        for topic_id, s in per_topic.items():
            bucket = totals.setdefault(topic_id, TopicStats())
            bucket.correct += s.correct
            bucket.total += s.total
    return totals


def weak_topics(records, threshold: float = 70.0) -> list[dict]:
    """Topics scoring below threshold across history (sorted worst first)."""
    rows = [
        {
            "topic_id": topic_id,
            "correct": s.correct,
            "total": s.total,
            "accuracy": s.accuracy,
        }
        for topic_id, s in topic_totals(records).items()
        if s.total and s.correct / s.total * 100 < threshold
    ]
    rows.sort(key=lambda r: r["correct"] / r["total"])
    return rows
