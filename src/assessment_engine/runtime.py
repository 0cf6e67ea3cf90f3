"""Shared setup for CLI commands: settings, workspace and logging."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .core.logging import LOGGER_NAME, configure_logger
from .core.workspace import WorkspaceLayout, ensure_workspace
from .settings import Settings, load_settings

__all__ = ["CommandContext", "prepare_context"]


@dataclass(frozen=True)
class CommandContext:
    settings: Settings
    layout: WorkspaceLayout
    logger: logging.Logger
    log_path: Path


def prepare_context(
    command: str,
    *,
    config_path: Optional[Path] = None,
    workspace_path: Optional[Path] = None,
    verbose: bool = False,
) -> CommandContext:
    """Load settings, create the workspace and attach the JSON log file.

    Raises ``SettingsError`` or ``WorkspaceError`` for the caller to report.
    """

    settings = load_settings(
        explicit_path=config_path, workspace_path=workspace_path
    )
    layout = ensure_workspace(path=workspace_path)
    logger, log_path = configure_logger(
        LOGGER_NAME,
        log_dir=layout.path_for("logs"),
        level=settings.logging.level,
        verbose=verbose or settings.logging.verbose,
        filename="assess.log",
    )
    logger.debug(
        "command.start",
        extra={"command": command, "config": settings.source},
    )
    return CommandContext(
        settings=settings, layout=layout, logger=logger, log_path=log_path
    )
