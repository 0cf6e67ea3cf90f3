from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Callable, Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
SRC_DIR = TESTS_DIR.parent / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from assessment_engine.core.logging import LOGGER_NAME  # noqa: E402
from assessment_engine.pool.models import (  # noqa: E402
    Question,
    create_question,
)


@pytest.fixture(autouse=True)
def _detach_engine_handlers() -> Iterator[None]:
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


@pytest.fixture
def workspace_home(tmp_path: Path, monkeypatch) -> Path:
    """Point ``ASSESS_DATA_HOME`` at a per-test directory."""

    home = tmp_path / "workspace"
    monkeypatch.setenv("ASSESS_DATA_HOME", str(home))
    monkeypatch.delenv("ASSESS_CONFIG", raising=False)
    return home


@pytest.fixture
def make_question() -> Callable[..., Question]:
    """Build valid questions with overridable fields and stable ids."""

    counter = {"value": 0}

    def _make(**overrides) -> Question:
        counter["value"] += 1
        fields = {
            "question_id": f"q{counter['value']}",
            "category_id": "math",
            "prompt": f"Question {counter['value']}?",
            "options": ["first", "second", "third", "fourth"],
            "correct_index": 0,
        }
        fields.update(overrides)
        return create_question(**fields)

    return _make
