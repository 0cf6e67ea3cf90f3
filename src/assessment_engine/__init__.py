"""Question pools, bulk ingestion and timed assessment sessions."""

from .errors import (
    AssessmentError,
    EmptyPoolError,
    IngestError,
    MalformedBatch,
    NoQuestionsFound,
    ValidationError,
)
from .ingest import (
    IngestReport,
    Rejection,
    ingest_auto,
    ingest_records,
    ingest_text,
    parse_outline_text,
    parse_records,
)
from .pool import (
    Category,
    Difficulty,
    Question,
    TestKind,
    create_question,
    in_categories,
    sample,
)
from .session import (
    Result,
    Session,
    SessionConfig,
    category_breakdown,
    score,
    start_session,
    trailing_trend,
)

__all__ = [
    "AssessmentError",
    "EmptyPoolError",
    "IngestError",
    "MalformedBatch",
    "NoQuestionsFound",
    "ValidationError",
    "IngestReport",
    "Rejection",
    "ingest_auto",
    "ingest_records",
    "ingest_text",
    "parse_outline_text",
    "parse_records",
    "Category",
    "Difficulty",
    "Question",
    "TestKind",
    "create_question",
    "in_categories",
    "sample",
    "Result",
    "Session",
    "SessionConfig",
    "category_breakdown",
    "score",
    "start_session",
    "trailing_trend",
]
