from __future__ import annotations

import json

import pytest

from assessment_engine.core.files import (
    append_jsonl,
    read_jsonl,
    read_text_file,
    write_jsonl,
)


def test_read_jsonl_missing_file_is_empty(tmp_path) -> None:
    assert read_jsonl(tmp_path / "absent.jsonl") == []


def test_write_then_append_jsonl(tmp_path) -> None:
    path = tmp_path / "data" / "rows.jsonl"

    write_jsonl(path, [{"id": 1}, {"id": 2, "text": "é"}])
    append_jsonl(path, [{"id": 3}])

    assert read_jsonl(path) == [{"id": 1}, {"id": 2, "text": "é"}, {"id": 3}]
    assert not (tmp_path / "data" / "rows.jsonl.tmp").exists()

    write_jsonl(path, [{"id": 9}])
    assert read_jsonl(path) == [{"id": 9}]


def test_read_jsonl_skips_blank_lines_and_raises_on_garbage(tmp_path) -> None:
    path = tmp_path / "rows.jsonl"
    path.write_text('{"a": 1}\n\n   \n{"a": 2}\n', encoding="utf-8")
    assert read_jsonl(path) == [{"a": 1}, {"a": 2}]

    path.write_text("nope\n", encoding="utf-8")
    with pytest.raises(json.JSONDecodeError):
        read_jsonl(path)


def test_read_text_file_replaces_bad_bytes(tmp_path) -> None:
    path = tmp_path / "input.txt"
    path.write_bytes(b"ok \xff done")

    assert read_text_file(path) == "ok � done"
