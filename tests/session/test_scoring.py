from __future__ import annotations

from datetime import datetime, timezone

import pytest

from assessment_engine.pool.models import TestKind
from assessment_engine.session.machine import SessionConfig, start_session
from assessment_engine.session.scoring import (
    AnswerRecord,
    Result,
    divide_half_up,
    percent,
    score,
)


@pytest.mark.parametrize(
    "part, whole, expected",
    [
        (1, 8, 13),
        (1, 3, 33),
        (2, 3, 67),
        (1, 2, 50),
        (1, 200, 1),
        (0, 5, 0),
        (5, 5, 100),
        (3, 0, 0),
    ],
)
def test_percent_rounds_half_up(part, whole, expected) -> None:
    assert percent(part, whole) == expected


def test_divide_half_up_handles_empty_divisor() -> None:
    assert divide_half_up(5, 2) == 3
    assert divide_half_up(7, 0) == 0


def test_score_classifies_every_question(make_question) -> None:
    questions = [make_question(correct_index=i % 4) for i in range(8)]
    session = start_session(
        SessionConfig(questions=questions, seconds_per_question=5)
    )
    session.select_option(0)
    session.go_to(1)
    session.select_option(0)
    session.go_to(2)
    session.select_option(2)

    result = score(session)

    assert result.total == 8
    assert result.correct + result.wrong + result.skipped == result.total
    assert (result.correct, result.wrong, result.skipped) == (2, 1, 5)
    assert result.score_percent == 25
    assert result.attempted == 3
    assert [a.selected for a in result.answers[:3]] == [0, 0, 2]
    assert session.is_in_progress


def test_answer_record_flags() -> None:
    assert AnswerRecord("q", "c", 1, 1).is_correct
    assert not AnswerRecord("q", "c", 0, 1).is_correct
    assert AnswerRecord("q", "c", None, 1).skipped


def test_result_from_dict_assumes_utc_for_naive_times() -> None:
    result = Result.from_dict(
        {
            "id": "r",
            "taken_at": "2024-02-03T04:05:06",
            "total": 1,
            "correct": 1,
            "wrong": 0,
            "skipped": 0,
            "score_percent": 100,
        }
    )
    assert result.taken_at == datetime(2024, 2, 3, 4, 5, 6, tzinfo=timezone.utc)
    assert result.test_kind is TestKind.MOCK
    assert result.answers == ()
