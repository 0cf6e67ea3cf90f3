"""CLI entry point for ``assess init``."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Mapping, Sequence

from assessment_engine.core import workspace as workspace_mod
from assessment_engine.core.workspace import WorkspaceError
from assessment_engine.settings import (
    CONFIG_FILENAME,
    SettingsError,
    write_default_config,
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="assess init",
        description=(
            "Bootstrap the assessment workspace (config, logs, question "
            "pool and result history)."
        ),
    )
    parser.add_argument(
        "--path",
        type=Path,
        help=(
            "Override the workspace root (defaults to ASSESS_DATA_HOME or "
            "~/.assessment-engine-data)."
        ),
    )
    parser.add_argument(
        "--write-config",
        action="store_true",
        help=f"Also write the default {CONFIG_FILENAME} into config/.",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing config when used with --write-config.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress informational output on success.",
    )
    return parser


def _format_created(created: Mapping[str, bool], key: str) -> str:
    return "created" if created.get(key, False) else "exists"


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        layout = workspace_mod.ensure_workspace(path=args.path)
    except WorkspaceError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1

    config_line = None
    if args.write_config:
        target = layout.path_for("config") / CONFIG_FILENAME
        try:
            write_default_config(target, overwrite=args.force)
        except SettingsError as exc:
            sys.stderr.write(f"Error: {exc}\n")
            return 1
        config_line = f"Config written to {target}"

    if args.quiet:
        return 0

    lines = [
        f"Workspace ready at {layout.home} "
        f"({_format_created(layout.created, 'home')})",
        "Subdirectories:",
    ]
    width = max(len(name) for name in layout.directories)
    for name, directory in layout.items():
        status = _format_created(layout.created, name)
        lines.append(f"  {name.ljust(width)}  {directory} ({status})")
    if config_line:
        lines.append(config_line)
    sys.stdout.write("\n".join(lines) + "\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
