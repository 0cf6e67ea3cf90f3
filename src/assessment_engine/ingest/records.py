"""Parser for arrays of loosely-typed question records.

Operators paste JSON exported from spreadsheets and other tools, so each
logical field is read from a list of accepted names tried in order.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any, List, Optional

from ..errors import MalformedBatch, NoQuestionsFound
from .candidate import ParsedQuestionCandidate, ParseOutcome, Rejection

__all__ = [
    "FIELD_ALIASES",
    "LETTER_FIELDS",
    "parse_records",
    "decode_records",
]

FIELD_ALIASES: Mapping[str, tuple[str, ...]] = {
    "prompt": ("question", "q"),
    "options": ("options", "opts"),
    "correct_index": ("correctIndex", "correct", "ans"),
    "explanation": ("explanation", "exp"),
    "difficulty": ("difficulty",),
    "category_id": ("categoryId", "category_id"),
    "question_id": ("id",),
    "tags": ("tags",),
}
LETTER_FIELDS = ("a", "b", "c", "d")


def decode_records(raw: object) -> Sequence[Any]:
    """Return the record array held by ``raw``.

    ``raw`` may be JSON text or an already-decoded list/tuple. Anything else
    raises :class:`MalformedBatch`.
    """

    data = raw
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise MalformedBatch(f"Invalid JSON: {exc.msg}") from exc
    if not isinstance(data, (list, tuple)):
        raise MalformedBatch(
            "Expected an array of question records, got "
            f"{type(data).__name__}."
        )
    return data


def parse_records(raw: object) -> ParseOutcome:
    """Read candidates from a record array, rejecting unusable records.

    Records without a prompt or with fewer than two options are rejected
    with a reason and never abort the batch, so the outcome may hold no
    candidates at all. Only an empty array raises :class:`NoQuestionsFound`.
    """

    records = decode_records(raw)
    if not records:
        raise NoQuestionsFound("The record array is empty.")
    candidates: List[ParsedQuestionCandidate] = []
    rejected: List[Rejection] = []

    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            rejected.append(Rejection(index, "record is not an object"))
            continue
        candidate, reason = _read_record(index, record)
        if candidate is None:
            rejected.append(Rejection(index, reason))
            continue
        candidates.append(candidate)

    return ParseOutcome(tuple(candidates), tuple(rejected))


def _read_record(
    index: int, record: Mapping[str, Any]
) -> tuple[Optional[ParsedQuestionCandidate], str]:
    prompt = _text(_first_truthy(record, FIELD_ALIASES["prompt"]))
    if not prompt:
        return None, "missing question text"

    options = _resolve_options(record)
    if options is None:
        return None, "options must be a list"
    if len(options) < 2:
        return None, f"fewer than 2 options ({len(options)} found)"

    return (
        ParsedQuestionCandidate(
            source_index=index,
            prompt=prompt,
            options=options,
            correct_index=_coerce_index(
                _first_present(record, FIELD_ALIASES["correct_index"])
            ),
            explanation=_text(
                _first_truthy(record, FIELD_ALIASES["explanation"])
            )
            or None,
            difficulty=_first_truthy(record, FIELD_ALIASES["difficulty"]),
            category_id=_text(
                _first_truthy(record, FIELD_ALIASES["category_id"])
            )
            or None,
            question_id=_text(
                _first_truthy(record, FIELD_ALIASES["question_id"])
            )
            or None,
            tags=_tags(_first_truthy(record, FIELD_ALIASES["tags"])),
        ),
        "",
    )


def _first_truthy(record: Mapping[str, Any], names: Sequence[str]) -> Any:
    for name in names:
        value = record.get(name)
        if value:
            return value
    return None


def _first_present(record: Mapping[str, Any], names: Sequence[str]) -> Any:
    for name in names:
        value = record.get(name)
        if value is not None:
            return value
    return 0


def _resolve_options(record: Mapping[str, Any]) -> Optional[tuple[str, ...]]:
    listed = _first_truthy(record, FIELD_ALIASES["options"])
    if listed is not None:
        if isinstance(listed, (str, bytes)) or not isinstance(
            listed, Sequence
        ):
            return None
        return tuple(_text(item) for item in listed if _text(item))
    return tuple(
        _text(record.get(name))
        for name in LETTER_FIELDS
        if _text(record.get(name))
    )


def _coerce_index(value: Any) -> Any:
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _text(value: Any) -> str:
    if value is None or isinstance(value, (Mapping, list, tuple)):
        return ""
    return str(value).strip()


def _tags(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(t for t in (_text(item) for item in value) if t)
