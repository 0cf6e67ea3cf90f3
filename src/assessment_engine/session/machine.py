"""Timed, navigable state machine for a single test attempt.

A :class:`Session` moves ``IN_PROGRESS -> FINISHED -> REVIEWING``. The host
owns the countdown and calls :meth:`Session.tick` once per second; the
session never schedules anything itself. Calls that do not apply to the
current phase are ignored rather than raised, so a timer firing just after a
manual submit is harmless.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Sequence

from ..errors import EmptyPoolError
from ..pool.models import Question, TestKind
from .scoring import Result, score

__all__ = [
    "Phase",
    "SessionConfig",
    "ReviewItem",
    "Session",
    "SessionMonitor",
    "start_session",
]

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
FinishCallback = Callable[[Result], None]


class Phase(str, Enum):
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"
    REVIEWING = "reviewing"


@dataclass(frozen=True)
class SessionConfig:
    """The sampled questions plus timing for one attempt."""

    questions: Sequence[Question]
    seconds_per_question: int
    title: str = ""
    test_kind: TestKind = TestKind.MOCK

    def __post_init__(self) -> None:
        object.__setattr__(self, "questions", tuple(self.questions))
        object.__setattr__(self, "test_kind", TestKind(self.test_kind))
        seconds = self.seconds_per_question
        if isinstance(seconds, bool) or not isinstance(seconds, int):
            raise ValueError("seconds_per_question must be an integer")
        if seconds <= 0:
            raise ValueError("seconds_per_question must be positive")

    @property
    def total_seconds(self) -> int:
        return len(self.questions) * self.seconds_per_question


@dataclass(frozen=True)
class ReviewItem:
    index: int
    question: Question
    selected: Optional[int]
    is_correct: bool
    skipped: bool

    @property
    def selected_text(self) -> Optional[str]:
        if self.selected is None:
            return None
        return self.question.options[self.selected]


@dataclass(eq=False)
class Session:
    """Mutable state of one attempt; see the module docstring."""

    config: SessionConfig
    clock: Clock = field(default=lambda: datetime.now(timezone.utc))
    on_finish: Optional[FinishCallback] = None
    current_index: int = field(init=False, default=0)
    answers: dict[int, Optional[int]] = field(init=False)
    remaining_seconds: int = field(init=False)
    phase: Phase = field(init=False, default=Phase.IN_PROGRESS)
    started_at: datetime = field(init=False)
    finished_at: Optional[datetime] = field(init=False, default=None)
    _result: Optional[Result] = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        if not self.config.questions:
            raise EmptyPoolError("Cannot start a session with no questions.")
        self.answers = {i: None for i in range(self.total_questions)}
        self.remaining_seconds = self.config.total_seconds
        self.started_at = self.now()
        logger.info(
            "session.started",
            extra={
                "title": self.config.title,
                "questions": self.total_questions,
                "budget_seconds": self.remaining_seconds,
                "test_kind": self.config.test_kind,
            },
        )

    def now(self) -> datetime:
        return self.clock()

    @property
    def total_questions(self) -> int:
        return len(self.config.questions)

    @property
    def current(self) -> Question:
        return self.config.questions[self.current_index]

    @property
    def result(self) -> Optional[Result]:
        return self._result

    @property
    def is_in_progress(self) -> bool:
        return self.phase is Phase.IN_PROGRESS

    def answered_count(self) -> int:
        return sum(1 for value in self.answers.values() if value is not None)

    def unanswered_indexes(self) -> list[int]:
        return [i for i, value in self.answers.items() if value is None]

    def selected_for(self, index: Optional[int] = None) -> Optional[int]:
        target = self.current_index if index is None else index
        return self.answers.get(target)

    def select_option(self, option_index: int) -> bool:
        """Record ``option_index`` for the current question.

        Replaces any earlier choice and leaves ``current_index`` unchanged.
        Returns ``False`` without changing anything when the session is not
        in progress or the option does not exist.
        """

        if not self.is_in_progress:
            return False
        if not 0 <= option_index < len(self.current.options):
            return False
        self.answers[self.current_index] = option_index
        return True

    def go_to(self, index: int) -> bool:
        if not self.is_in_progress:
            return False
        if not 0 <= index < self.total_questions:
            return False
        self.current_index = index
        return True

    def next(self) -> bool:
        return self.go_to(self.current_index + 1)

    def previous(self) -> bool:
        return self.go_to(self.current_index - 1)

    def tick(self) -> Optional[Result]:
        """Advance the countdown one second.

        Returns the result when this tick ran the clock out and submitted the
        session, otherwise ``None``.
        """

        if not self.is_in_progress:
            return None
        self.remaining_seconds = max(0, self.remaining_seconds - 1)
        if self.remaining_seconds == 0:
            return self._finish(timed_out=True)
        return None

    def submit(self) -> Result:
        """Finish the attempt and return its result.

        Partial submissions are allowed. Later calls return the same result
        without scoring again.
        """

        if self._result is not None:
            return self._result
        return self._finish(timed_out=False)

    def enter_review(self) -> list[ReviewItem]:
        """Switch a finished session to review and list per-question outcomes.

        Returns an empty list while the session is still in progress.
        """

        if self.phase is Phase.IN_PROGRESS:
            return []
        self.phase = Phase.REVIEWING
        return self.review_items()

    def review_items(self) -> list[ReviewItem]:
        items: list[ReviewItem] = []
        for index, question in enumerate(self.config.questions):
            selected = self.answers.get(index)
            items.append(
                ReviewItem(
                    index=index,
                    question=question,
                    selected=selected,
                    is_correct=question.is_correct(selected),
                    skipped=selected is None,
                )
            )
        return items

    def _finish(self, *, timed_out: bool) -> Result:
        self.phase = Phase.FINISHED
        self.finished_at = self.now()
        result = score(self, timed_out=timed_out)
        self._result = result
        logger.info(
            "session.finished",
            extra={
                "result_id": result.id,
                "score_percent": result.score_percent,
                "correct": result.correct,
                "wrong": result.wrong,
                "skipped": result.skipped,
                "timed_out": timed_out,
            },
        )
        if self.on_finish is not None:
            self.on_finish(result)
        return result


def start_session(
    config: SessionConfig,
    *,
    clock: Optional[Clock] = None,
    on_finish: Optional[FinishCallback] = None,
) -> Session:
    """Create an in-progress session positioned on the first question.

    Raises :class:`EmptyPoolError` when ``config`` has no questions.
    """

    if clock is None:
        return Session(config, on_finish=on_finish)
    return Session(config, clock=clock, on_finish=on_finish)


class SessionMonitor:
    """Serialize access to a session shared with a timer thread.

    Only needed when ``tick`` runs on a different thread from user input;
    single-threaded hosts can drive :class:`Session` directly.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self._lock = threading.Lock()

    @property
    def session(self) -> Session:
        return self._session

    def select_option(self, option_index: int) -> bool:
        with self._lock:
            return self._session.select_option(option_index)

    def go_to(self, index: int) -> bool:
        with self._lock:
            return self._session.go_to(index)

    def tick(self) -> Optional[Result]:
        with self._lock:
            return self._session.tick()

    def submit(self) -> Result:
        with self._lock:
            return self._session.submit()

    def enter_review(self) -> list[ReviewItem]:
        with self._lock:
            return self._session.enter_review()
