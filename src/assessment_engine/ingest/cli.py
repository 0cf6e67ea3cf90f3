"""CLI entry point for ``assess ingest``."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from assessment_engine.core.files import read_text_file
from assessment_engine.core.workspace import WorkspaceError
from assessment_engine.errors import IngestError
from assessment_engine.pool.repository import JsonlQuestionRepository
from assessment_engine.runtime import prepare_context
from assessment_engine.settings import SettingsError

from .candidate import Rejection
from .pipeline import IngestReport, ingest_auto


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="assess ingest",
        description=(
            "Parse outline text, a JSON record array or a delimited table "
            "into validated questions and add them to the workspace pool."
        ),
    )
    parser.add_argument(
        "INPUT",
        help="File to read, or '-' for standard input",
    )
    parser.add_argument(
        "--format",
        choices=("auto", "outline", "records", "table"),
        help="Input encoding (defaults to ingest.default_format)",
    )
    parser.add_argument(
        "--category",
        help="Category id for questions that do not name one",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate and report without writing to the pool",
    )
    parser.add_argument("--config", type=Path, help="Path to assessment.toml")
    parser.add_argument("--workspace", type=Path, help="Workspace root")
    parser.add_argument("--verbose", action="store_true")
    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    console: Optional[Console] = None,
) -> int:
    args = build_arg_parser().parse_args(
        list(argv) if argv is not None else None
    )
    out = console or Console()

    try:
        ctx = prepare_context(
            "ingest",
            config_path=args.config,
            workspace_path=args.workspace,
            verbose=args.verbose,
        )
    except (SettingsError, WorkspaceError) as exc:
        out.print(f"[red]Error:[/] {exc}")
        return 2

    try:
        text = (
            sys.stdin.read()
            if args.INPUT == "-"
            else read_text_file(Path(args.INPUT).expanduser())
        )
    except OSError as exc:
        out.print(f"[red]Error:[/] cannot read {args.INPUT}: {exc}")
        return 2

    repository = None
    if not args.dry_run:
        repository = JsonlQuestionRepository(ctx.layout.questions_file)
    try:
        report = ingest_auto(
            text,
            fmt=args.format or ctx.settings.ingest.default_format,
            category_id=args.category or ctx.settings.ingest.default_category,
            repository=repository,
        )
    except IngestError as exc:
        ctx.logger.warning("ingest.failed", extra={"reason": str(exc)})
        out.print(f"[red]Nothing imported:[/] {exc}")
        _render_rejections(out, exc.rejected)
        return 1

    if not report.accepted:
        ctx.logger.warning(
            "ingest.failed",
            extra={"reason": "every item was rejected"},
        )
        out.print(
            "[red]Nothing imported:[/] all "
            f"{len(report.rejected)} item(s) were rejected."
        )
        _render_rejections(out, report.rejected)
        return 1

    _render_report(out, report, dry_run=args.dry_run)
    return 0


def _render_report(
    console: Console, report: IngestReport, *, dry_run: bool
) -> None:
    verb = "Validated" if dry_run else "Imported"
    console.print(
        f"[green]{verb} {report.accepted_count} question(s)[/]"
        f", rejected {len(report.rejected)}."
    )
    _render_rejections(console, report.rejected)


def _render_rejections(
    console: Console, rejected: Sequence[Rejection]
) -> None:
    if not rejected:
        return
    table = Table(title="Rejected items", box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Reason")
    for item in rejected:
        table.add_row(str(item.index + 1), item.reason)
    console.print(table)


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
