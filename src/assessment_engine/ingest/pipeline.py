"""Validate parsed candidates and commit the accepted questions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Literal, Optional

from ..errors import MalformedBatch, ValidationError
from ..pool.models import Question, create_question
from ..pool.repository import QuestionRepository
from .candidate import ParseOutcome, Rejection
from .outline import parse_outline_text
from .records import parse_records
from .rows import parse_table_text

__all__ = [
    "IngestReport",
    "InputFormat",
    "ingest_text",
    "ingest_records",
    "ingest_table",
    "ingest_auto",
    "detect_format",
]

logger = logging.getLogger(__name__)

InputFormat = Literal["outline", "records", "table"]


@dataclass(frozen=True)
class IngestReport:
    accepted: tuple[Question, ...]
    rejected: tuple[Rejection, ...]

    @property
    def accepted_count(self) -> int:
        return len(self.accepted)


def ingest_text(
    text: str,
    *,
    category_id: str = "",
    repository: Optional[QuestionRepository] = None,
) -> IngestReport:
    """Ingest outline text; see :func:`parse_outline_text` for the format."""

    return _commit(
        parse_outline_text(text),
        category_id=category_id,
        repository=repository,
        source="outline",
    )


def ingest_records(
    records: object,
    *,
    category_id: str = "",
    repository: Optional[QuestionRepository] = None,
) -> IngestReport:
    """Ingest a record array given as JSON text or decoded objects."""

    return _commit(
        parse_records(records),
        category_id=category_id,
        repository=repository,
        source="records",
    )


def ingest_table(
    text: str,
    *,
    category_id: str = "",
    repository: Optional[QuestionRepository] = None,
) -> IngestReport:
    """Ingest delimited ``Question | A | B | C | D | Correct`` rows."""

    return _commit(
        parse_table_text(text),
        category_id=category_id,
        repository=repository,
        source="table",
    )


def detect_format(text: str) -> InputFormat:
    """Guess the encoding of operator input.

    Anything that opens like JSON goes to the record parser, so a lone
    object fails there as a malformed batch instead of as an outline.
    Tables are never guessed.
    """

    stripped = (text or "").lstrip()
    return "records" if stripped[:1] in ("[", "{") else "outline"


def ingest_auto(
    text: str,
    *,
    fmt: str = "auto",
    category_id: str = "",
    repository: Optional[QuestionRepository] = None,
) -> IngestReport:
    resolved = detect_format(text) if fmt == "auto" else fmt
    handlers: dict[str, Callable[..., IngestReport]] = {
        "outline": ingest_text,
        "records": ingest_records,
        "table": ingest_table,
    }
    handler = handlers.get(resolved)
    if handler is None:
        raise MalformedBatch(f"Unknown input format '{fmt}'.")
    return handler(text, category_id=category_id, repository=repository)


def _commit(
    outcome: ParseOutcome,
    *,
    category_id: str,
    repository: Optional[QuestionRepository],
    source: str,
) -> IngestReport:
    accepted: List[Question] = []
    rejected: List[Rejection] = list(outcome.rejected)

    for candidate in outcome.candidates:
        try:
            question = create_question(
                question_id=candidate.question_id,
                category_id=candidate.category_id or category_id,
                prompt=candidate.prompt,
                options=candidate.options,
                correct_index=candidate.correct_index,
                explanation=candidate.explanation,
                difficulty=candidate.difficulty,
                tags=candidate.tags,
            )
        except ValidationError as exc:
            rejected.append(Rejection(candidate.source_index, str(exc)))
            continue
        accepted.append(question)

    rejected.sort(key=lambda item: item.index)
    if repository is not None and accepted:
        repository.add_many(accepted)

    logger.info(
        "ingest.completed",
        extra={
            "source": source,
            "accepted": len(accepted),
            "rejected": len(rejected),
            "committed": repository is not None,
        },
    )
    return IngestReport(tuple(accepted), tuple(rejected))
