"""Question and category records plus their validation rules."""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..errors import ValidationError

__all__ = [
    "Difficulty",
    "TestKind",
    "Question",
    "Category",
    "create_question",
    "build_category_index",
    "category_descendants",
]

MIN_OPTIONS = 2


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: object) -> "Difficulty":
        """Map ``value`` onto the allow-list, defaulting to ``MEDIUM``."""

        if isinstance(value, Difficulty):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.MEDIUM


class TestKind(str, Enum):
    MOCK = "mock"
    LIVE = "live"

    __test__ = False  # keep pytest from collecting the enum


@dataclass(frozen=True)
class Question:
    """A validated multiple-choice question.

    Instances come from :func:`create_question`; an edit produces a new
    record with the same ``id``.
    """

    id: str
    category_id: str
    prompt: str
    options: tuple[str, ...]
    correct_index: int
    explanation: str | None = None
    difficulty: Difficulty = Difficulty.MEDIUM
    tags: tuple[str, ...] = field(default_factory=tuple)

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_index]

    def is_correct(self, selected: int | None) -> bool:
        return selected is not None and selected == self.correct_index

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "category_id": self.category_id,
            "prompt": self.prompt,
            "options": list(self.options),
            "correct_index": self.correct_index,
            "difficulty": self.difficulty.value,
        }
        if self.explanation:
            payload["explanation"] = self.explanation
        if self.tags:
            payload["tags"] = list(self.tags)
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Question":
        return create_question(
            question_id=payload.get("id"),
            category_id=payload.get("category_id", ""),
            prompt=payload.get("prompt", ""),
            options=payload.get("options", ()),
            correct_index=payload.get("correct_index", 0),
            explanation=payload.get("explanation"),
            difficulty=payload.get("difficulty"),
            tags=payload.get("tags", ()),
        )


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    subject_id: str
    parent_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "subject_id": self.subject_id,
        }
        if self.parent_id:
            payload["parent_id"] = self.parent_id
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Category":
        parent = payload.get("parent_id")
        return cls(
            id=str(payload.get("id", "")),
            name=str(payload.get("name", "")),
            subject_id=str(payload.get("subject_id", "")),
            parent_id=str(parent) if parent else None,
        )


def create_question(
    *,
    prompt: object,
    options: object,
    correct_index: object = 0,
    category_id: object = "",
    explanation: object = None,
    difficulty: object = None,
    tags: object = (),
    question_id: object = None,
) -> Question:
    """Validate raw fields and build a :class:`Question`.

    Raises :class:`ValidationError` when the prompt is blank, when fewer than
    two options are given or any option is blank, or when ``correct_index``
    is not an integer index into the options.
    """

    text = _clean_text(prompt)
    if not text:
        raise ValidationError("prompt must be non-empty")

    cleaned = _clean_options(options)
    if len(cleaned) < MIN_OPTIONS:
        raise ValidationError(
            f"at least {MIN_OPTIONS} non-empty options are required, "
            f"found {len(cleaned)}"
        )

    if isinstance(correct_index, bool) or not isinstance(correct_index, int):
        raise ValidationError("correct_index must be an integer")
    if not 0 <= correct_index < len(cleaned):
        raise ValidationError(
            f"correct_index {correct_index} is out of range for "
            f"{len(cleaned)} options"
        )

    return Question(
        id=_clean_text(question_id) or uuid.uuid4().hex,
        category_id=_clean_text(category_id),
        prompt=text,
        options=cleaned,
        correct_index=correct_index,
        explanation=_clean_text(explanation) or None,
        difficulty=Difficulty.parse(difficulty),
        tags=_clean_tags(tags),
    )


def _clean_text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _clean_options(options: object) -> tuple[str, ...]:
    if isinstance(options, (str, bytes)) or not isinstance(options, Iterable):
        raise ValidationError("options must be a sequence of strings")
    cleaned: list[str] = []
    for position, option in enumerate(options, start=1):
        text = _clean_text(option)
        if not text:
            raise ValidationError(f"option {position} is empty")
        cleaned.append(text)
    return tuple(cleaned)


def _clean_tags(tags: object) -> tuple[str, ...]:
    if not tags:
        return ()
    if isinstance(tags, str):
        tags = tags.split(",")
    if not isinstance(tags, Iterable):
        return ()
    seen: dict[str, None] = {}
    for tag in tags:
        text = _clean_text(tag)
        if text:
            seen.setdefault(text, None)
    return tuple(seen)


def build_category_index(
    categories: Sequence[Category],
) -> dict[str, Category]:
    """Index ``categories`` by id, enforcing the parent rules.

    A parent must appear earlier in the sequence than its children, which
    rules out cycles and self-references. Only one level of nesting is
    allowed.
    """

    index: dict[str, Category] = {}
    for category in categories:
        if not category.id:
            raise ValidationError("category id must be non-empty")
        if category.id in index:
            raise ValidationError(f"duplicate category id '{category.id}'")
        if category.parent_id is not None:
            parent = index.get(category.parent_id)
            if parent is None:
                raise ValidationError(
                    f"category '{category.id}' references unknown parent "
                    f"'{category.parent_id}'"
                )
            if parent.parent_id is not None:
                raise ValidationError(
                    f"category '{category.id}' nests more than one level"
                )
        index[category.id] = category
    return index


def category_descendants(
    category_ids: Iterable[str], categories: Sequence[Category]
) -> frozenset[str]:
    """Return ``category_ids`` plus the ids of their direct children."""

    selected = set(category_ids)
    for category in categories:
        if category.parent_id in selected:
            selected.add(category.id)
    return frozenset(selected)
