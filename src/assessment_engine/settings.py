"""Typed application settings loaded from ``assessment.toml``.

Defaults live in ``_DEFAULTS``; a user file may override any subset of keys
but unknown keys are rejected so typos surface early.
"""

from __future__ import annotations

import copy
import os
import tomllib
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional

from .core import workspace as workspace_mod
from .core.workspace import WorkspaceError

__all__ = [
    "CONFIG_FILENAME",
    "CONFIG_PATH_ENV",
    "SettingsError",
    "SessionSettings",
    "IngestSettings",
    "AnalyticsSettings",
    "LoggingSettings",
    "Settings",
    "default_settings",
    "resolve_config_path",
    "load_settings",
    "build_settings",
    "default_config_text",
    "write_default_config",
]

CONFIG_FILENAME = "assessment.toml"
CONFIG_PATH_ENV = "ASSESS_CONFIG"

_INPUT_FORMATS = ("auto", "outline", "records", "table")
_TEST_KINDS = ("mock", "live")


class SettingsError(RuntimeError):
    """Raised when settings cannot be located, parsed or validated."""


@dataclass(frozen=True)
class SessionSettings:
    seconds_per_question: int
    question_count: int
    test_kind: str
    show_review: bool


@dataclass(frozen=True)
class IngestSettings:
    default_format: str
    default_category: str


@dataclass(frozen=True)
class AnalyticsSettings:
    trend_window: int


@dataclass(frozen=True)
class LoggingSettings:
    level: str
    verbose: bool


@dataclass(frozen=True)
class Settings:
    session: SessionSettings
    ingest: IngestSettings
    analytics: AnalyticsSettings
    logging: LoggingSettings
    source: Optional[Path] = None


_DEFAULTS: Dict[str, Any] = {
    "session": {
        "seconds_per_question": 30,
        "question_count": 20,
        "test_kind": "mock",
        "show_review": True,
    },
    "ingest": {
        "default_format": "auto",
        "default_category": "general",
    },
    "analytics": {
        "trend_window": 10,
    },
    "logging": {
        "level": "INFO",
        "verbose": False,
    },
}


def default_settings() -> Settings:
    return build_settings(copy.deepcopy(_DEFAULTS))


def resolve_config_path(
    *,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
    workspace_path: Optional[Path] = None,
) -> Optional[Path]:
    """Locate the settings file.

    Order: ``explicit_path``, ``$ASSESS_CONFIG``, the workspace
    ``config/assessment.toml``. Returns ``None`` when only the workspace
    candidate was considered and it does not exist.
    """

    env_map = os.environ if env is None else env
    if explicit_path is not None:
        path = Path(explicit_path).expanduser().resolve()
        if not path.exists():
            raise SettingsError(f"Config not found: {path}")
        return path
    override = (env_map.get(CONFIG_PATH_ENV) or "").strip()
    if override:
        path = Path(override).expanduser().resolve()
        if not path.exists():
            raise SettingsError(
                f"{CONFIG_PATH_ENV} points to a missing file: {path}"
            )
        return path
    try:
        layout = workspace_mod.ensure_workspace(
            env=env_map, path=workspace_path, create=False
        )
    except WorkspaceError as exc:
        raise SettingsError(str(exc)) from exc
    candidate = layout.path_for("config") / CONFIG_FILENAME
    return candidate if candidate.exists() else None


def load_settings(
    *,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
    workspace_path: Optional[Path] = None,
) -> Settings:
    """Load settings, falling back to defaults when no file exists."""

    path = resolve_config_path(
        explicit_path=explicit_path,
        env=env,
        workspace_path=workspace_path,
    )
    tree = copy.deepcopy(_DEFAULTS)
    if path is not None:
        _overlay(tree, _read_toml(path))
    return build_settings(tree, source=path)


def default_config_text() -> str:
    """Return the commented ``assessment.toml`` shipped with the package."""

    resource = resources.files(__package__).joinpath(CONFIG_FILENAME)
    return resource.read_text(encoding="utf-8")


def write_default_config(path: Path, *, overwrite: bool = False) -> Path:
    """Copy the packaged config to ``path``, owner-readable only."""

    if path.exists() and not overwrite:
        raise SettingsError(f"Config already exists: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(default_config_text(), encoding="utf-8")
    path.chmod(0o600)
    return path


def _read_toml(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except OSError as exc:
        raise SettingsError(f"Cannot read config {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise SettingsError(f"Failed to parse {path}: {exc}") from exc


def _overlay(
    tree: MutableMapping[str, Any],
    data: Mapping[str, Any],
    prefix: str = "",
) -> None:
    # Only keys present in _DEFAULTS may be set; sections must stay tables.
    for key, value in data.items():
        field = prefix + key
        if key not in tree:
            raise SettingsError(f"Unknown configuration key '{field}'.")
        if not isinstance(tree[key], MutableMapping):
            tree[key] = value
        elif isinstance(value, Mapping):
            _overlay(tree[key], value, f"{field}.")
        else:
            raise SettingsError(f"[{field}] must be a table.")


def build_settings(
    tree: Mapping[str, Any], *, source: Optional[Path] = None
) -> Settings:
    session = tree["session"]
    ingest = tree["ingest"]
    analytics = tree["analytics"]
    logging_section = tree["logging"]
    return Settings(
        session=SessionSettings(
            seconds_per_question=_require_positive_int(
                session["seconds_per_question"],
                field="session.seconds_per_question",
            ),
            question_count=_require_positive_int(
                session["question_count"], field="session.question_count"
            ),
            test_kind=_require_choice(
                session["test_kind"],
                field="session.test_kind",
                choices=_TEST_KINDS,
            ),
            show_review=_require_bool(
                session["show_review"], field="session.show_review"
            ),
        ),
        ingest=IngestSettings(
            default_format=_require_choice(
                ingest["default_format"],
                field="ingest.default_format",
                choices=_INPUT_FORMATS,
            ),
            default_category=_require_string(
                ingest["default_category"], field="ingest.default_category"
            ),
        ),
        analytics=AnalyticsSettings(
            trend_window=_require_positive_int(
                analytics["trend_window"], field="analytics.trend_window"
            ),
        ),
        logging=LoggingSettings(
            level=_require_string(
                logging_section["level"], field="logging.level"
            ).upper(),
            verbose=_require_bool(
                logging_section["verbose"], field="logging.verbose"
            ),
        ),
        source=source,
    )


def _require_positive_int(value: Any, *, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise SettingsError(f"'{field}' must be a positive integer.")
    return value


def _require_bool(value: Any, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise SettingsError(f"'{field}' must be a boolean.")
    return value


def _require_string(value: Any, *, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise SettingsError(f"'{field}' must be a non-empty string.")
    return value.strip()


def _require_choice(
    value: Any, *, field: str, choices: tuple[str, ...]
) -> str:
    text = _require_string(value, field=field).lower()
    if text not in choices:
        raise SettingsError(
            f"'{field}' must be one of: {', '.join(choices)}."
        )
    return text
