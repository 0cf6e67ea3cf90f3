"""Bulk question ingestion from outline text, record arrays or tables."""

from .candidate import ParsedQuestionCandidate, ParseOutcome, Rejection
from .outline import parse_outline_text
from .pipeline import (
    IngestReport,
    detect_format,
    ingest_auto,
    ingest_records,
    ingest_table,
    ingest_text,
)
from .records import FIELD_ALIASES, decode_records, parse_records
from .rows import ANSWER_KEYS, parse_rows, parse_table_text

__all__ = [
    "ParsedQuestionCandidate",
    "ParseOutcome",
    "Rejection",
    "parse_outline_text",
    "parse_records",
    "decode_records",
    "FIELD_ALIASES",
    "ANSWER_KEYS",
    "parse_rows",
    "parse_table_text",
    "IngestReport",
    "detect_format",
    "ingest_auto",
    "ingest_records",
    "ingest_table",
    "ingest_text",
]
