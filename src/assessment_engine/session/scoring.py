"""Turn a finished session into an immutable result record."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any, Mapping, Optional

from ..pool.models import TestKind

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .machine import Session

__all__ = [
    "AnswerRecord",
    "Result",
    "score",
    "percent",
    "divide_half_up",
]


def divide_half_up(numerator: int, denominator: int) -> int:
    """Integer division rounding .5 away from zero; 0 for an empty divisor."""

    if denominator <= 0:
        return 0
    value = Decimal(numerator) / Decimal(denominator)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percent(part: int, whole: int) -> int:
    """Return ``part / whole`` as a whole percentage, rounding half up."""

    return divide_half_up(part * 100, whole)


@dataclass(frozen=True)
class AnswerRecord:
    question_id: str
    category_id: str
    selected: Optional[int]
    correct_index: int

    @property
    def is_correct(self) -> bool:
        return self.selected is not None and self.selected == self.correct_index

    @property
    def skipped(self) -> bool:
        return self.selected is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "question_id": self.question_id,
            "category_id": self.category_id,
            "selected": self.selected,
            "correct_index": self.correct_index,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "AnswerRecord":
        selected = payload.get("selected")
        return cls(
            question_id=str(payload["question_id"]),
            category_id=str(payload.get("category_id", "")),
            selected=int(selected) if selected is not None else None,
            correct_index=int(payload["correct_index"]),
        )


@dataclass(frozen=True)
class Result:
    """Outcome of one attempt. Appended to history, never edited."""

    id: str
    taken_at: datetime
    test_kind: TestKind
    total: int
    correct: int
    wrong: int
    skipped: int
    score_percent: int
    title: str = ""
    time_taken_seconds: int = 0
    timed_out: bool = False
    answers: tuple[AnswerRecord, ...] = field(default_factory=tuple)

    @property
    def attempted(self) -> int:
        return self.total - self.skipped

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "taken_at": self.taken_at.isoformat(),
            "test_kind": self.test_kind.value,
            "title": self.title,
            "total": self.total,
            "correct": self.correct,
            "wrong": self.wrong,
            "skipped": self.skipped,
            "score_percent": self.score_percent,
            "time_taken_seconds": self.time_taken_seconds,
            "timed_out": self.timed_out,
            "answers": [answer.to_dict() for answer in self.answers],
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Result":
        taken_at = datetime.fromisoformat(str(payload["taken_at"]))
        if taken_at.tzinfo is None:
            taken_at = taken_at.replace(tzinfo=timezone.utc)
        return cls(
            id=str(payload["id"]),
            taken_at=taken_at,
            test_kind=TestKind(payload.get("test_kind", TestKind.MOCK.value)),
            total=int(payload["total"]),
            correct=int(payload["correct"]),
            wrong=int(payload["wrong"]),
            skipped=int(payload["skipped"]),
            score_percent=int(payload["score_percent"]),
            title=str(payload.get("title", "")),
            time_taken_seconds=int(payload.get("time_taken_seconds", 0)),
            timed_out=bool(payload.get("timed_out", False)),
            answers=tuple(
                AnswerRecord.from_dict(item)
                for item in payload.get("answers", ())
            ),
        )


def score(session: "Session", *, timed_out: bool = False) -> Result:
    """Classify every question of ``session`` and build a :class:`Result`.

    Each index counts as correct, wrong (an option other than the correct
    one was chosen) or skipped (nothing chosen). Reads the session only.
    """

    questions = session.config.questions
    answers = []
    correct = wrong = skipped = 0
    for index, question in enumerate(questions):
        selected = session.answers.get(index)
        record = AnswerRecord(
            question_id=question.id,
            category_id=question.category_id,
            selected=selected,
            correct_index=question.correct_index,
        )
        if record.skipped:
            skipped += 1
        elif record.is_correct:
            correct += 1
        else:
            wrong += 1
        answers.append(record)

    finished_at = session.finished_at or session.now()
    elapsed = (finished_at - session.started_at).total_seconds()
    total = len(questions)
    return Result(
        id=uuid.uuid4().hex,
        taken_at=finished_at,
        test_kind=session.config.test_kind,
        total=total,
        correct=correct,
        wrong=wrong,
        skipped=skipped,
        score_percent=percent(correct, total),
        title=session.config.title,
        time_taken_seconds=max(0, int(elapsed)),
        timed_out=timed_out,
        answers=tuple(answers),
    )
