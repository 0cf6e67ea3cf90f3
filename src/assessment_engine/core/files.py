"""File helpers for workspace data stored as text or JSON Lines."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, List, Mapping

__all__ = [
    "read_text_file",
    "read_jsonl",
    "write_jsonl",
    "append_jsonl",
]


def read_text_file(path: Path) -> str:
    """Read a text file as UTF-8 with replacement for decode errors."""
    with Path(path).open("r", encoding="utf-8", errors="replace") as fh:
        return fh.read()


def read_jsonl(path: Path) -> List[dict]:
    """Return one dict per non-blank line; a missing file reads as empty."""
    p = Path(path)
    if not p.exists():
        return []
    data: List[dict] = []
    with p.open("r", encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line:
                continue
            data.append(json.loads(line))
    return data


def write_jsonl(path: Path, records: Iterable[Mapping[str, Any]]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_name(p.name + ".tmp")
    with tmp.open("w", encoding="utf-8") as fh:
        for rec in records:
            fh.write(json.dumps(dict(rec), ensure_ascii=False))
            fh.write("\n")
    tmp.replace(p)


def append_jsonl(path: Path, records: Iterable[Mapping[str, Any]]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("a", encoding="utf-8") as fh:
        for rec in records:
            fh.write(json.dumps(dict(rec), ensure_ascii=False))
            fh.write("\n")
