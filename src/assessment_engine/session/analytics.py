"""Trends over result history and per-result breakdowns."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import Sequence

from ..pool.models import Category
from .scoring import Result, divide_half_up, percent

__all__ = [
    "Trend",
    "CategoryStat",
    "trailing_trend",
    "category_breakdown",
    "accuracy_percent",
    "attempt_rate",
    "average_seconds_per_question",
    "grade_label",
]

_GRADES = (
    (90, "Excellent"),
    (80, "Great Job"),
    (70, "Good"),
    (50, "Keep Practicing"),
)


@dataclass(frozen=True)
class Trend:
    entries: tuple[Result, ...]
    scores: tuple[int, ...]
    mean: float

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class CategoryStat:
    category_id: str
    name: str
    total: int
    correct: int
    wrong: int

    @property
    def accuracy(self) -> int:
        return percent(self.correct, self.total)


def trailing_trend(history: Sequence[Result], window_size: int) -> Trend:
    """Return the last ``window_size`` results, oldest first, and their mean.

    A window larger than the history uses every result; an empty history
    gives a mean of ``0.0``.
    """

    if window_size < 1:
        raise ValueError("window_size must be >= 1")
    ordered = sorted(history, key=lambda result: result.taken_at)
    window = tuple(ordered[-window_size:])
    scores = tuple(result.score_percent for result in window)
    mean = sum(scores) / len(scores) if scores else 0.0
    return Trend(entries=window, scores=scores, mean=mean)


def category_breakdown(
    result: Result, categories: Sequence[Category] = ()
) -> list[CategoryStat]:
    """Group ``result.answers`` by category, largest groups first."""

    names = {category.id: category.name for category in categories}
    buckets: "OrderedDict[str, list[int]]" = OrderedDict()
    for answer in result.answers:
        key = answer.category_id or "unknown"
        counts = buckets.setdefault(key, [0, 0, 0])
        counts[0] += 1
        if answer.is_correct:
            counts[1] += 1
        elif not answer.skipped:
            counts[2] += 1
    stats = [
        CategoryStat(
            category_id=key,
            name=names.get(key, "Other"),
            total=total,
            correct=correct,
            wrong=wrong,
        )
        for key, (total, correct, wrong) in buckets.items()
    ]
    stats.sort(key=lambda stat: stat.total, reverse=True)
    return stats


def accuracy_percent(result: Result) -> int:
    """Correct answers as a share of attempted ones."""

    return percent(result.correct, result.correct + result.wrong)


def attempt_rate(result: Result) -> int:
    return percent(result.attempted, result.total)


def average_seconds_per_question(result: Result) -> int:
    return divide_half_up(result.time_taken_seconds, result.total)


def grade_label(score_percent: int) -> str:
    for threshold, label in _GRADES:
        if score_percent >= threshold:
            return label
    return "Needs Improvement"
