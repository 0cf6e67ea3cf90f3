"""Random question selection with composable inclusion predicates."""

from __future__ import annotations

import random
from collections.abc import Callable, Iterable, Sequence
from typing import Optional

from ..errors import EmptyPoolError
from .models import Category, Difficulty, Question, category_descendants

__all__ = [
    "Predicate",
    "sample",
    "require_questions",
    "in_categories",
    "has_tags",
    "with_difficulty",
    "with_ids",
    "all_of",
]

Predicate = Callable[[Question], bool]


def sample(
    pool: Sequence[Question],
    predicate: Optional[Predicate] = None,
    desired_count: int = 0,
    *,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
    shuffle: bool = True,
) -> list[Question]:
    """Draw up to ``desired_count`` distinct questions matching ``predicate``.

    The filtered pool is uniformly permuted and a prefix is returned, so no
    question is drawn twice. ``predicate=None`` includes every question.
    Results vary between calls unless ``seed`` or ``rng`` is supplied.
    With ``shuffle=False`` the prefix is taken in pool order instead.
    """

    if desired_count < 0:
        raise ValueError("desired_count must be >= 0")
    eligible = [q for q in pool if predicate is None or predicate(q)]
    count = min(desired_count, len(eligible))
    if count == 0:
        return []
    if not shuffle:
        return eligible[:count]
    chooser = rng if rng is not None else random.Random(seed)
    return chooser.sample(eligible, count)


def require_questions(questions: Sequence[Question]) -> Sequence[Question]:
    """Return ``questions`` or raise :class:`EmptyPoolError` if empty."""

    if not questions:
        raise EmptyPoolError("No eligible questions; cannot start a session.")
    return questions


def in_categories(
    category_ids: Iterable[str],
    categories: Sequence[Category] = (),
) -> Predicate:
    """Match questions in the given categories or their child categories."""

    wanted = category_descendants(category_ids, categories)
    return lambda question: question.category_id in wanted


def has_tags(*tags: str, match_all: bool = False) -> Predicate:
    """Match questions carrying any (or, with ``match_all``, every) tag.

    Blank tags are ignored; with none left every question matches.
    """

    wanted = {tag.strip() for tag in tags if tag.strip()}
    if not wanted:
        return lambda question: True

    def _predicate(question: Question) -> bool:
        present = wanted.intersection(question.tags)
        return present == wanted if match_all else bool(present)

    return _predicate


def with_difficulty(*levels: object) -> Predicate:
    allowed = {Difficulty.parse(level) for level in levels}
    return lambda question: question.difficulty in allowed


def with_ids(question_ids: Iterable[str]) -> Predicate:
    """Match a fixed id set, e.g. the questions picked for a live test."""

    wanted = frozenset(question_ids)
    return lambda question: question.id in wanted


def all_of(*predicates: Optional[Predicate]) -> Predicate:
    active = [p for p in predicates if p is not None]
    return lambda question: all(p(question) for p in active)
