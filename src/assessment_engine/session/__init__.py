"""Timed sessions: state machine, scoring, analytics and the console host."""

from .analytics import (
    CategoryStat,
    Trend,
    accuracy_percent,
    attempt_rate,
    average_seconds_per_question,
    category_breakdown,
    grade_label,
    trailing_trend,
)
from .machine import (
    Phase,
    ReviewItem,
    Session,
    SessionConfig,
    SessionMonitor,
    start_session,
)
from .runner import (
    RunOutcome,
    SessionCommand,
    parse_session_command,
    render_result,
    render_review,
    render_trend,
    run_session,
)
from .scoring import AnswerRecord, Result, divide_half_up, percent, score

__all__ = [
    "CategoryStat",
    "Trend",
    "accuracy_percent",
    "attempt_rate",
    "average_seconds_per_question",
    "category_breakdown",
    "grade_label",
    "trailing_trend",
    "Phase",
    "ReviewItem",
    "Session",
    "SessionConfig",
    "SessionMonitor",
    "start_session",
    "RunOutcome",
    "SessionCommand",
    "parse_session_command",
    "render_result",
    "render_review",
    "render_trend",
    "run_session",
    "AnswerRecord",
    "Result",
    "divide_half_up",
    "percent",
    "score",
]
