"""Transient shapes produced by the ingestion parsers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class ParsedQuestionCandidate:
    """A question as read from the source, before validation.

    ``source_index`` is the 0-based position of the originating block or
    record so rejections can point back at the input.
    """

    source_index: int
    prompt: str
    options: tuple[str, ...]
    correct_index: object = 0
    explanation: Optional[str] = None
    difficulty: Optional[str] = None
    category_id: Optional[str] = None
    question_id: Optional[str] = None
    tags: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Rejection:
    index: int
    reason: str


@dataclass(frozen=True)
class ParseOutcome:
    candidates: tuple[ParsedQuestionCandidate, ...]
    rejected: tuple[Rejection, ...] = ()
