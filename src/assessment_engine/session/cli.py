"""CLI entry points for ``assess take`` and ``assess history``."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console

from assessment_engine.core.workspace import WorkspaceError
from assessment_engine.errors import EmptyPoolError
from assessment_engine.pool.models import Question, TestKind
from assessment_engine.pool.repository import (
    JsonlCategoryRepository,
    JsonlQuestionRepository,
    JsonlResultRepository,
    RepositoryError,
)
from assessment_engine.pool.sampler import (
    all_of,
    has_tags,
    in_categories,
    require_questions,
    sample,
    with_difficulty,
    with_ids,
)
from assessment_engine.runtime import CommandContext, prepare_context
from assessment_engine.settings import SettingsError

from .analytics import trailing_trend
from .machine import SessionConfig, start_session
from .runner import InputProvider, render_trend, run_session


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", type=Path, help="Path to assessment.toml")
    parser.add_argument("--workspace", type=Path, help="Workspace root")
    parser.add_argument("--verbose", action="store_true")


def build_take_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="assess take",
        description="Sample questions from the pool and run a timed test.",
    )
    parser.add_argument(
        "--category",
        action="append",
        default=[],
        help="Include this category and its children (repeatable)",
    )
    parser.add_argument(
        "--difficulty",
        action="append",
        default=[],
        choices=("easy", "medium", "hard"),
        help="Restrict to these difficulties (repeatable)",
    )
    parser.add_argument(
        "--tag",
        action="append",
        default=[],
        help="Require at least one of these tags (repeatable)",
    )
    parser.add_argument(
        "--question-id",
        action="append",
        default=[],
        help="Use exactly these questions, e.g. for a live test",
    )
    parser.add_argument("--count", type=int, help="Number of questions")
    parser.add_argument(
        "--seconds", type=int, help="Seconds allowed per question"
    )
    parser.add_argument("--seed", type=int, help="Seed for reproducible picks")
    parser.add_argument(
        "--no-shuffle",
        action="store_true",
        help=(
            "Keep pool order, or the --question-id order when ids are given"
        ),
    )
    parser.add_argument("--kind", choices=("mock", "live"))
    parser.add_argument("--title", default="", help="Title shown on results")
    parser.add_argument(
        "--no-review",
        action="store_true",
        help="Skip the per-question review after submitting",
    )
    _add_common(parser)
    return parser


def build_history_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="assess history",
        description="Show recent results and their average score.",
    )
    parser.add_argument(
        "--window", type=int, help="Number of recent results to show"
    )
    _add_common(parser)
    return parser


def _context(
    command: str, args: argparse.Namespace, console: Console
) -> Optional[CommandContext]:
    try:
        return prepare_context(
            command,
            config_path=args.config,
            workspace_path=args.workspace,
            verbose=args.verbose,
        )
    except (SettingsError, WorkspaceError) as exc:
        console.print(f"[red]Error:[/] {exc}")
        return None


def take_main(
    argv: Optional[Sequence[str]] = None,
    *,
    console: Optional[Console] = None,
    input_provider: Optional[InputProvider] = None,
) -> int:
    args = build_take_parser().parse_args(
        list(argv) if argv is not None else None
    )
    out = console or Console()
    ctx = _context("take", args, out)
    if ctx is None:
        return 2

    defaults = ctx.settings.session
    count = args.count if args.count is not None else defaults.question_count
    seconds = (
        args.seconds
        if args.seconds is not None
        else defaults.seconds_per_question
    )
    if count <= 0 or seconds <= 0:
        out.print("[red]Error:[/] --count and --seconds must be positive.")
        return 2

    try:
        pool = JsonlQuestionRepository(ctx.layout.questions_file).all()
        categories = JsonlCategoryRepository(
            ctx.layout.categories_file
        ).all()
    except RepositoryError as exc:
        out.print(f"[red]Error:[/] {exc}")
        return 1

    predicate = all_of(
        in_categories(args.category, categories) if args.category else None,
        with_difficulty(*args.difficulty) if args.difficulty else None,
        has_tags(*args.tag) if args.tag else None,
        with_ids(args.question_id) if args.question_id else None,
    )
    if args.no_shuffle and args.question_id:
        pool = _in_id_order(pool, args.question_id)
    questions = sample(
        pool, predicate, count, seed=args.seed, shuffle=not args.no_shuffle
    )
    try:
        require_questions(questions)
    except EmptyPoolError as exc:
        ctx.logger.info("take.empty_pool", extra={"pool": len(pool)})
        out.print(f"[yellow]{exc}[/] Add questions with `assess ingest`.")
        return 1

    history = JsonlResultRepository(ctx.layout.results_file)
    config = SessionConfig(
        questions=questions,
        seconds_per_question=seconds,
        title=args.title or "Practice test",
        test_kind=TestKind(args.kind or defaults.test_kind),
    )
    session = start_session(config, on_finish=history.append)
    outcome = run_session(
        session,
        out,
        input_provider or (lambda: out.input("[bold]> [/]")),
        show_review=defaults.show_review and not args.no_review,
        categories=categories,
    )
    ctx.logger.info(
        "take.completed", extra={"exit_action": outcome.exit_action}
    )
    return 0


def history_main(
    argv: Optional[Sequence[str]] = None,
    *,
    console: Optional[Console] = None,
) -> int:
    args = build_history_parser().parse_args(
        list(argv) if argv is not None else None
    )
    out = console or Console()
    ctx = _context("history", args, out)
    if ctx is None:
        return 2

    window = (
        args.window
        if args.window is not None
        else ctx.settings.analytics.trend_window
    )
    if window <= 0:
        out.print("[red]Error:[/] --window must be positive.")
        return 2
    try:
        results = JsonlResultRepository(ctx.layout.results_file).all()
    except RepositoryError as exc:
        out.print(f"[red]Error:[/] {exc}")
        return 1
    render_trend(out, trailing_trend(results, window))
    return 0


def _in_id_order(
    pool: Sequence[Question], question_ids: Sequence[str]
) -> list[Question]:
    position: dict[str, int] = {}
    for index, question_id in enumerate(question_ids):
        position.setdefault(question_id, index)
    return sorted(pool, key=lambda q: position.get(q.id, len(position)))
