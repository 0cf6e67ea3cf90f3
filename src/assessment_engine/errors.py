"""Exception types raised by the assessment engine."""

from __future__ import annotations

from typing import Any, Sequence

__all__ = [
    "AssessmentError",
    "ValidationError",
    "IngestError",
    "NoQuestionsFound",
    "MalformedBatch",
    "EmptyPoolError",
]


class AssessmentError(RuntimeError):
    """Base class for engine errors surfaced to a host."""


class ValidationError(AssessmentError, ValueError):
    """A single question or category failed validation."""


class IngestError(AssessmentError):
    """A whole ingestion batch failed; nothing was committed.

    ``rejected`` carries any per-item rejections collected before the batch
    was abandoned so hosts can still show them.
    """

    def __init__(self, message: str, *, rejected: Sequence[Any] = ()) -> None:
        super().__init__(message)
        self.rejected = tuple(rejected)


class NoQuestionsFound(IngestError):
    """The input parsed cleanly but yielded no question candidates."""


class MalformedBatch(IngestError):
    """The input container itself could not be parsed."""


class EmptyPoolError(AssessmentError):
    """No eligible questions exist, so a session cannot start."""
