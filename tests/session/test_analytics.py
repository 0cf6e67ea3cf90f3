from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from assessment_engine.pool.models import Category, TestKind
from assessment_engine.session.analytics import (
    accuracy_percent,
    attempt_rate,
    average_seconds_per_question,
    category_breakdown,
    grade_label,
    trailing_trend,
)
from assessment_engine.session.scoring import AnswerRecord, Result

BASE = datetime(2024, 3, 1, tzinfo=timezone.utc)


def make_result(day: int, score: int, **overrides) -> Result:
    fields = dict(
        id=f"r{day}",
        taken_at=BASE + timedelta(days=day),
        test_kind=TestKind.MOCK,
        total=10,
        correct=score // 10,
        wrong=10 - score // 10,
        skipped=0,
        score_percent=score,
    )
    fields.update(overrides)
    return Result(**fields)


def test_trailing_trend_uses_whole_short_history() -> None:
    history = [make_result(2, 60), make_result(0, 40), make_result(1, 80)]

    trend = trailing_trend(history, 10)

    assert len(trend) == 3
    assert trend.scores == (40, 80, 60)
    assert trend.mean == pytest.approx(60.0)


def test_trailing_trend_keeps_most_recent_window() -> None:
    history = [make_result(day, day * 10) for day in range(12)]

    trend = trailing_trend(history, 3)

    assert [r.id for r in trend.entries] == ["r9", "r10", "r11"]
    assert trend.mean == pytest.approx(100.0)


def test_trailing_trend_empty_and_invalid_window() -> None:
    empty = trailing_trend([], 5)
    assert len(empty) == 0
    assert empty.mean == 0.0
    with pytest.raises(ValueError):
        trailing_trend([], 0)


def test_category_breakdown_groups_and_names() -> None:
    result = make_result(
        0,
        50,
        total=5,
        correct=2,
        wrong=1,
        skipped=2,
        answers=(
            AnswerRecord("q1", "math", 0, 0),
            AnswerRecord("q2", "math", 1, 0),
            AnswerRecord("q3", "math", None, 0),
            AnswerRecord("q4", "art", 2, 2),
            AnswerRecord("q5", "", None, 1),
        ),
    )
    stats = category_breakdown(result, [Category("math", "Math", "s")])

    assert [s.category_id for s in stats] == ["math", "art", "unknown"]
    math = stats[0]
    assert (math.name, math.total, math.correct, math.wrong) == (
        "Math",
        3,
        1,
        1,
    )
    assert math.accuracy == 33
    assert stats[1].name == "Other"


def test_rates_and_grades() -> None:
    result = make_result(
        0, 30, total=10, correct=3, wrong=1, skipped=6, time_taken_seconds=45
    )

    assert accuracy_percent(result) == 75
    assert attempt_rate(result) == 40
    assert average_seconds_per_question(result) == 5

    assert grade_label(95) == "Excellent"
    assert grade_label(80) == "Great Job"
    assert grade_label(70) == "Good"
    assert grade_label(50) == "Keep Practicing"
    assert grade_label(49) == "Needs Improvement"
