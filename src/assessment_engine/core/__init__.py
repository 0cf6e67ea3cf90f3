"""Core shared helpers for assessment-engine commands."""

from __future__ import annotations

from .files import append_jsonl, read_jsonl, read_text_file, write_jsonl
from .logging import LOGGER_NAME, JsonLogFormatter, configure_logger
from .workspace import (
    WORKSPACE_ENV,
    WorkspaceError,
    WorkspaceLayout,
    ensure_workspace,
)

__all__ = [
    "read_text_file",
    "read_jsonl",
    "write_jsonl",
    "append_jsonl",
    "LOGGER_NAME",
    "JsonLogFormatter",
    "configure_logger",
    "WORKSPACE_ENV",
    "WorkspaceError",
    "WorkspaceLayout",
    "ensure_workspace",
]
