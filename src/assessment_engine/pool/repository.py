"""Storage seams for the question pool, categories and result history.

The engine only talks to the protocols below. Hosts pick an implementation:
the in-memory ones back tests and embedding applications, the JSON Lines
ones back the ``assess`` CLI workspace.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, List, Protocol, Sequence

from ..core.files import append_jsonl, read_jsonl, write_jsonl
from ..errors import AssessmentError, ValidationError
from .models import Category, Question, build_category_index

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from ..session.scoring import Result

__all__ = [
    "RepositoryError",
    "QuestionRepository",
    "CategoryRepository",
    "ResultRepository",
    "InMemoryQuestionRepository",
    "InMemoryCategoryRepository",
    "InMemoryResultRepository",
    "JsonlQuestionRepository",
    "JsonlCategoryRepository",
    "JsonlResultRepository",
]

logger = logging.getLogger(__name__)


class RepositoryError(AssessmentError):
    """Raised when stored records cannot be read back."""


class QuestionRepository(Protocol):
    def all(self) -> List[Question]: ...

    def add_many(self, questions: Sequence[Question]) -> None: ...

    def replace(self, question: Question) -> None: ...


class CategoryRepository(Protocol):
    def all(self) -> List[Category]: ...


class ResultRepository(Protocol):
    def all(self) -> List["Result"]: ...

    def append(self, result: "Result") -> None: ...


class InMemoryQuestionRepository:
    def __init__(self, questions: Iterable[Question] = ()) -> None:
        self._questions: List[Question] = list(questions)

    def all(self) -> List[Question]:
        return list(self._questions)

    def add_many(self, questions: Sequence[Question]) -> None:
        self._questions.extend(questions)

    def replace(self, question: Question) -> None:
        self._questions = _replace_by_id(self._questions, question)


class InMemoryCategoryRepository:
    def __init__(self, categories: Iterable[Category] = ()) -> None:
        self._categories = list(categories)
        build_category_index(self._categories)

    def all(self) -> List[Category]:
        return list(self._categories)


class InMemoryResultRepository:
    def __init__(self, results: Iterable["Result"] = ()) -> None:
        self._results: List["Result"] = list(results)

    def all(self) -> List["Result"]:
        return list(self._results)

    def append(self, result: "Result") -> None:
        self._results.append(result)


class JsonlQuestionRepository:
    """Question pool persisted as one JSON object per line."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def all(self) -> List[Question]:
        questions: List[Question] = []
        for lineno, payload in enumerate(_read(self.path), start=1):
            try:
                questions.append(Question.from_dict(payload))
            except ValidationError as exc:
                raise RepositoryError(
                    f"{self.path}:{lineno}: invalid question ({exc})"
                ) from exc
        return questions

    def add_many(self, questions: Sequence[Question]) -> None:
        if not questions:
            return
        append_jsonl(self.path, (q.to_dict() for q in questions))
        logger.debug(
            "questions.appended",
            extra={"path": self.path, "count": len(questions)},
        )

    def replace(self, question: Question) -> None:
        updated = _replace_by_id(self.all(), question)
        write_jsonl(self.path, (q.to_dict() for q in updated))


class JsonlCategoryRepository:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def all(self) -> List[Category]:
        categories = [Category.from_dict(item) for item in _read(self.path)]
        try:
            build_category_index(categories)
        except ValidationError as exc:
            raise RepositoryError(f"{self.path}: {exc}") from exc
        return categories


class JsonlResultRepository:
    """Append-only result history."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def all(self) -> List["Result"]:
        from ..session.scoring import Result

        results: List[Result] = []
        for lineno, payload in enumerate(_read(self.path), start=1):
            try:
                results.append(Result.from_dict(payload))
            except (KeyError, TypeError, ValueError) as exc:
                raise RepositoryError(
                    f"{self.path}:{lineno}: invalid result ({exc})"
                ) from exc
        return results

    def append(self, result: "Result") -> None:
        append_jsonl(self.path, [result.to_dict()])
        logger.debug(
            "result.appended",
            extra={"path": self.path, "result_id": result.id},
        )


def _read(path: Path) -> List[dict]:
    try:
        payloads = read_jsonl(path)
    except json.JSONDecodeError as exc:
        raise RepositoryError(f"{path}: corrupt JSON line ({exc})") from exc
    for lineno, payload in enumerate(payloads, start=1):
        if not isinstance(payload, Mapping):
            raise RepositoryError(
                f"{path}:{lineno}: expected a JSON object, "
                f"found {type(payload).__name__}"
            )
    return payloads


def _replace_by_id(
    questions: Sequence[Question], question: Question
) -> List[Question]:
    replaced = False
    updated: List[Question] = []
    for existing in questions:
        if existing.id == question.id:
            updated.append(question)
            replaced = True
        else:
            updated.append(existing)
    if not replaced:
        raise KeyError(f"Unknown question id '{question.id}'.")
    return updated
