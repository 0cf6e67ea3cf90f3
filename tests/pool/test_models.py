from __future__ import annotations

import pytest

from assessment_engine.errors import ValidationError
from assessment_engine.pool.models import (
    Category,
    Difficulty,
    Question,
    build_category_index,
    category_descendants,
    create_question,
)


def test_create_question_trims_fields_and_generates_id() -> None:
    question = create_question(
        prompt="  What is 2 + 2?  ",
        options=[" 3 ", "4", "5"],
        correct_index=1,
        category_id=" math ",
        explanation="  basic arithmetic ",
        difficulty="HARD",
        tags="arith, basics, arith",
    )

    assert question.prompt == "What is 2 + 2?"
    assert question.options == ("3", "4", "5")
    assert question.category_id == "math"
    assert question.explanation == "basic arithmetic"
    assert question.difficulty is Difficulty.HARD
    assert question.tags == ("arith", "basics")
    assert question.correct_option == "4"
    assert len(question.id) == 32


def test_create_question_keeps_explicit_id() -> None:
    question = create_question(
        prompt="Pick one", options=["a", "b"], question_id="fixed"
    )
    assert question.id == "fixed"
    assert question.difficulty is Difficulty.MEDIUM
    assert question.explanation is None


@pytest.mark.parametrize(
    "fields, message",
    [
        ({"prompt": "   "}, "prompt must be non-empty"),
        ({"options": ["only"]}, "at least 2"),
        ({"options": "ab"}, "options must be a sequence"),
        ({"options": ["a", " ", "c"]}, "option 2 is empty"),
        ({"correct_index": 2}, "out of range"),
        ({"correct_index": -1}, "out of range"),
        ({"correct_index": "1"}, "must be an integer"),
        ({"correct_index": True}, "must be an integer"),
    ],
)
def test_create_question_rejects_invalid_fields(fields, message) -> None:
    raw = {"prompt": "Pick one", "options": ["a", "b"], "correct_index": 0}
    raw.update(fields)
    with pytest.raises(ValidationError, match=message):
        create_question(**raw)


def test_difficulty_parse_defaults_to_medium() -> None:
    assert Difficulty.parse("easy") is Difficulty.EASY
    assert Difficulty.parse(" Hard ") is Difficulty.HARD
    assert Difficulty.parse("impossible") is Difficulty.MEDIUM
    assert Difficulty.parse(None) is Difficulty.MEDIUM
    assert Difficulty.parse(3) is Difficulty.MEDIUM


def test_is_correct_treats_none_as_wrong(make_question) -> None:
    question = make_question(correct_index=2)
    assert question.is_correct(2)
    assert not question.is_correct(0)
    assert not question.is_correct(None)


def test_question_dict_round_trip_preserves_identity(make_question) -> None:
    question = make_question(explanation="why", tags=["t1"])
    payload = question.to_dict()

    assert payload["difficulty"] == "medium"
    assert payload["tags"] == ["t1"]
    assert Question.from_dict(payload) == question


def test_question_from_dict_revalidates() -> None:
    with pytest.raises(ValidationError):
        Question.from_dict({"id": "x", "prompt": "p", "options": ["a"]})


def test_build_category_index_accepts_one_level() -> None:
    categories = [
        Category("science", "Science", "gen"),
        Category("physics", "Physics", "gen", parent_id="science"),
    ]
    index = build_category_index(categories)
    assert list(index) == ["science", "physics"]


@pytest.mark.parametrize(
    "categories, message",
    [
        (
            [Category("a", "A", "s"), Category("a", "A again", "s")],
            "duplicate",
        ),
        ([Category("b", "B", "s", parent_id="a")], "unknown parent"),
        ([Category("a", "A", "s", parent_id="a")], "unknown parent"),
        (
            [
                Category("a", "A", "s"),
                Category("b", "B", "s", parent_id="a"),
                Category("c", "C", "s", parent_id="b"),
            ],
            "more than one level",
        ),
        ([Category("", "Blank", "s")], "non-empty"),
    ],
)
def test_build_category_index_rejects_bad_trees(categories, message) -> None:
    with pytest.raises(ValidationError, match=message):
        build_category_index(categories)


def test_category_descendants_adds_children_only() -> None:
    categories = [
        Category("science", "Science", "gen"),
        Category("physics", "Physics", "gen", parent_id="science"),
        Category("history", "History", "gen"),
    ]
    assert category_descendants(["science"], categories) == {
        "science",
        "physics",
    }
    assert category_descendants(["physics"], categories) == {"physics"}


def test_category_from_dict_normalizes_parent() -> None:
    category = Category.from_dict(
        {"id": "x", "name": "X", "subject_id": "s", "parent_id": ""}
    )
    assert category.parent_id is None
    assert "parent_id" not in category.to_dict()
