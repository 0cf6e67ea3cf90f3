"""Parser for spreadsheet-style rows exported as delimited text.

Each row reads ``Question | A | B | C | D | Correct``. The first non-empty
row is a header and is skipped. ``Correct`` is a letter (``A``-``D``) or a
1-based number; anything else selects the first option.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Sequence
from typing import List

from ..errors import MalformedBatch, NoQuestionsFound
from .candidate import ParsedQuestionCandidate, ParseOutcome, Rejection

__all__ = ["ANSWER_KEYS", "parse_rows", "parse_table_text"]

ANSWER_KEYS = {
    "A": 0,
    "1": 0,
    "B": 1,
    "2": 1,
    "C": 2,
    "3": 2,
    "D": 3,
    "4": 3,
}
_OPTION_COLUMNS = slice(1, 5)
_ANSWER_COLUMN = 5
_DELIMITERS = ",\t|;"


def parse_table_text(text: str) -> ParseOutcome:
    """Split delimited ``text`` into rows and parse them.

    The delimiter is sniffed from the header row among comma, tab, pipe and
    semicolon.
    """

    body = (text or "").strip()
    if not body:
        raise NoQuestionsFound("The table is empty.")
    header = body.splitlines()[0]
    try:
        dialect = csv.Sniffer().sniff(header, delimiters=_DELIMITERS)
    except csv.Error as exc:
        raise MalformedBatch(
            "Could not detect the column delimiter of the header row."
        ) from exc
    reader = csv.reader(
        io.StringIO(body),
        delimiter=dialect.delimiter,
        skipinitialspace=True,
    )
    return parse_rows(list(reader))


def parse_rows(rows: Iterable[Sequence[object]]) -> ParseOutcome:
    """Read one candidate per data row.

    ``source_index`` counts data rows from 0, not counting the header.
    Blank rows are ignored. Rows without question text or with fewer than
    two options are rejected with a reason.
    """

    data = [list(row) for row in rows if any(_cell(c) for c in row)]
    if len(data) < 2:
        raise NoQuestionsFound("The table has no rows below the header.")

    candidates: List[ParsedQuestionCandidate] = []
    rejected: List[Rejection] = []
    for index, row in enumerate(data[1:]):
        prompt = _cell(row[0]) if row else ""
        if not prompt:
            rejected.append(Rejection(index, "missing question text"))
            continue
        # Options keep their column so ``Correct`` stays aligned; only
        # trailing empty columns are dropped.
        options = [_cell(c) for c in row[_OPTION_COLUMNS]]
        while options and not options[-1]:
            options.pop()
        filled = sum(1 for option in options if option)
        if filled < 2:
            rejected.append(
                Rejection(index, f"fewer than 2 options ({filled} found)")
            )
            continue
        answer = _cell(row[_ANSWER_COLUMN]) if len(row) > 5 else ""
        candidates.append(
            ParsedQuestionCandidate(
                source_index=index,
                prompt=prompt,
                options=tuple(options),
                correct_index=ANSWER_KEYS.get(answer.upper(), 0),
            )
        )
    return ParseOutcome(tuple(candidates), tuple(rejected))


def _cell(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()
