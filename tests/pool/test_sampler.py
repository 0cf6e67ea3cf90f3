from __future__ import annotations

import random

import pytest

from assessment_engine.errors import EmptyPoolError
from assessment_engine.pool.models import Category, Difficulty
from assessment_engine.pool.sampler import (
    all_of,
    has_tags,
    in_categories,
    require_questions,
    sample,
    with_difficulty,
    with_ids,
)


@pytest.fixture
def pool(make_question):
    return [
        make_question(category_id="math", difficulty="easy", tags=["algebra"]),
        make_question(category_id="math", difficulty="hard"),
        make_question(category_id="geometry", tags=["shapes", "algebra"]),
        make_question(category_id="history"),
        make_question(category_id="history", difficulty="easy"),
    ]


def test_sample_returns_distinct_subset_of_requested_size(pool) -> None:
    drawn = sample(pool, None, 3, seed=7)

    assert len(drawn) == 3
    assert len({q.id for q in drawn}) == 3
    assert all(q in pool for q in drawn)


def test_sample_caps_at_eligible_count(pool) -> None:
    drawn = sample(pool, in_categories(["history"]), 10)

    assert sorted(q.id for q in drawn) == ["q4", "q5"]


def test_sample_zero_or_no_match_returns_empty(pool) -> None:
    assert sample(pool, None, 0) == []
    assert sample(pool, in_categories(["chemistry"]), 5) == []
    assert sample([], None, 5) == []


def test_sample_rejects_negative_count(pool) -> None:
    with pytest.raises(ValueError):
        sample(pool, None, -1)


def test_sample_is_reproducible_with_seed_or_rng(pool) -> None:
    first = sample(pool, None, 4, seed=42)
    second = sample(pool, None, 4, seed=42)
    assert [q.id for q in first] == [q.id for q in second]

    rng_a = random.Random(3)
    rng_b = random.Random(3)
    assert sample(pool, None, 5, rng=rng_a) == sample(pool, None, 5, rng=rng_b)


def test_sample_draws_every_question_given_enough_draws(pool) -> None:
    seen = set()
    rng = random.Random(0)
    for _ in range(200):
        seen.update(q.id for q in sample(pool, None, 1, rng=rng))
    assert seen == {q.id for q in pool}


def test_in_categories_includes_child_categories(pool, make_question) -> None:
    categories = [
        Category("math", "Math", "stem"),
        Category("geometry", "Geometry", "stem", parent_id="math"),
        Category("history", "History", "humanities"),
    ]
    predicate = in_categories(["math"], categories)

    matched = {q.category_id for q in pool if predicate(q)}
    assert matched == {"math", "geometry"}


def test_has_tags_any_and_all(pool) -> None:
    any_tag = has_tags("algebra", "shapes")
    both = has_tags("algebra", "shapes", match_all=True)

    assert [q.id for q in pool if any_tag(q)] == ["q1", "q3"]
    assert [q.id for q in pool if both(q)] == ["q3"]


def test_with_difficulty_accepts_names_and_members(pool) -> None:
    predicate = with_difficulty("easy", Difficulty.HARD)
    assert [q.id for q in pool if predicate(q)] == ["q1", "q2", "q5"]


def test_all_of_combines_and_skips_none(pool) -> None:
    predicate = all_of(
        in_categories(["math", "history"]),
        None,
        with_difficulty("easy"),
    )
    assert [q.id for q in pool if predicate(q)] == ["q1", "q5"]
    assert all(all_of()(q) for q in pool)


def test_with_ids_selects_fixed_set(pool) -> None:
    drawn = sample(pool, with_ids(["q2", "q4", "missing"]), 10, seed=1)
    assert sorted(q.id for q in drawn) == ["q2", "q4"]


def test_require_questions_raises_for_empty_selection(pool) -> None:
    assert require_questions(pool) is pool
    with pytest.raises(EmptyPoolError):
        require_questions([])


def test_has_tags_without_tags_matches_everything(pool) -> None:
    for predicate in (has_tags(), has_tags(" ", ""), has_tags(match_all=True)):
        assert [q.id for q in pool if predicate(q)] == [q.id for q in pool]

    assert len(sample(pool, has_tags(), 10, seed=3)) == len(pool)


def test_sample_without_shuffle_keeps_pool_order(pool) -> None:
    drawn = sample(pool, with_difficulty("easy", "hard"), 2, shuffle=False)
    assert [q.id for q in drawn] == ["q1", "q2"]

    everything = sample(pool, None, 10, seed=99, shuffle=False)
    assert everything == pool
