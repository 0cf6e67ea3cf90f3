"""Parser for the blank-line separated outline text format.

A block looks like::

    1. What is the capital of France?
    a) Berlin
    b) Paris
    c) Rome
    d) Madrid
    Ans: 2
    Exp: Paris has been the capital since 987.
    Diff: easy

The first line is the prompt, up to four enumerated lines are options, and
``Ans``/``Exp``/``Diff`` lines carry the answer, explanation and difficulty.
"""

from __future__ import annotations

import re
from typing import List, Optional

from ..errors import NoQuestionsFound
from .candidate import ParsedQuestionCandidate, ParseOutcome, Rejection

__all__ = ["parse_outline_text", "MIN_BLOCK_LINES", "MAX_OPTIONS"]

MIN_BLOCK_LINES = 6
MAX_OPTIONS = 4

_BLOCK_SPLIT = re.compile(r"\n[ \t]*\n")
_PROMPT_ENUM = re.compile(r"^\d+\.\s*")
_OPTION = re.compile(
    r"^(?:\((?:\d|[a-z])\)|(?:\d|[a-z])[.)])\s*(?P<text>.*)$",
    re.IGNORECASE,
)
_ANSWER = re.compile(
    r"^(?:answer|ans)\s*[:.]?\s*(?P<key>\d|[a-d])\b", re.IGNORECASE
)
_EXPLANATION = re.compile(
    r"^(?:explanation|exp)\s*[:.]\s*(?P<text>.*)$", re.IGNORECASE
)
_DIFFICULTY = re.compile(
    r"^(?:difficulty|diff)\s*[:.]\s*(?P<text>.*)$", re.IGNORECASE
)


def parse_outline_text(text: str) -> ParseOutcome:
    """Split ``text`` into blocks and read one candidate per block.

    Blocks with fewer than six non-empty lines are reported as rejected
    instead of parsed. Raises :class:`NoQuestionsFound` when no block yields
    a candidate.
    """

    normalized = (text or "").replace("\r\n", "\n").replace("\r", "\n")
    candidates: List[ParsedQuestionCandidate] = []
    rejected: List[Rejection] = []

    blocks = [b for b in _BLOCK_SPLIT.split(normalized) if b.strip()]
    for index, block in enumerate(blocks):
        lines = [line.strip() for line in block.split("\n") if line.strip()]
        if len(lines) < MIN_BLOCK_LINES:
            rejected.append(
                Rejection(
                    index,
                    f"block has fewer than {MIN_BLOCK_LINES} non-empty lines",
                )
            )
            continue
        candidates.append(_parse_block(index, lines))

    if not candidates:
        raise NoQuestionsFound(
            "No questions found in outline text.", rejected=rejected
        )
    return ParseOutcome(tuple(candidates), tuple(rejected))


def _parse_block(index: int, lines: List[str]) -> ParsedQuestionCandidate:
    prompt = _PROMPT_ENUM.sub("", lines[0], count=1).strip()
    options: List[str] = []
    answer: Optional[int] = None
    starred: Optional[int] = None
    explanation: Optional[str] = None
    difficulty: Optional[str] = None

    for line in lines[1:]:
        match = _ANSWER.match(line)
        if match:
            answer = _answer_index(match.group("key"))
            continue
        match = _EXPLANATION.match(line)
        if match:
            explanation = match.group("text").strip() or None
            continue
        match = _DIFFICULTY.match(line)
        if match:
            difficulty = match.group("text").strip() or None
            continue
        marked = line.startswith("*")
        match = _OPTION.match(line[1:].lstrip() if marked else line)
        if match and len(options) < MAX_OPTIONS:
            if marked:
                starred = len(options)
            options.append(match.group("text").strip())

    if answer is None:
        answer = starred if starred is not None else 0
    return ParsedQuestionCandidate(
        source_index=index,
        prompt=prompt,
        options=tuple(options),
        correct_index=answer,
        explanation=explanation,
        difficulty=difficulty,
    )


def _answer_index(key: str) -> int:
    if key.isdigit():
        return int(key) - 1
    return ord(key.lower()) - ord("a")
