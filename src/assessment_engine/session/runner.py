"""Rich-powered console host for a :class:`~.machine.Session`.

The loop renders the current question, reads one command, then converts the
wall-clock time spent waiting into ``tick()`` calls before applying the
command. A command typed after the countdown ran out is discarded because the
session already submitted itself.
"""

from __future__ import annotations

import string
import time
from dataclasses import dataclass
from typing import Callable, Literal, Optional, Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..pool.models import Category
from .analytics import (
    Trend,
    accuracy_percent,
    attempt_rate,
    average_seconds_per_question,
    category_breakdown,
    grade_label,
)
from .machine import ReviewItem, Session
from .scoring import Result

__all__ = [
    "InputProvider",
    "ExitAction",
    "SessionCommand",
    "RunOutcome",
    "parse_session_command",
    "run_session",
    "render_result",
    "render_review",
    "render_trend",
    "format_clock",
]

InputProvider = Callable[[], str]
Timer = Callable[[], float]
ExitAction = Literal["submitted", "timeout", "quit"]


@dataclass(frozen=True)
class SessionCommand:
    """Normalized user command parsed from console input."""

    type: Literal["next", "prev", "goto", "select", "submit", "quit"]
    value: Optional[int] = None


@dataclass(frozen=True)
class RunOutcome:
    exit_action: ExitAction
    result: Optional[Result]
    review: tuple[ReviewItem, ...] = ()


def parse_session_command(
    raw: Optional[str], option_count: int = 4
) -> Optional[SessionCommand]:
    """Parse console input into a command.

    Options are chosen by number (``1``) or letter (``a``); ``g 5`` jumps to
    question five. Navigation words win over option letters.
    """

    if raw is None:
        return None
    text = raw.strip().lower()
    if not text:
        return None
    if text in {"n", "next"}:
        return SessionCommand("next")
    if text in {"p", "prev", "previous"}:
        return SessionCommand("prev")
    if text in {"s", "submit"}:
        return SessionCommand("submit")
    if text in {"q", "quit", "exit"}:
        return SessionCommand("quit")

    head, _, tail = text.partition(" ")
    if head in {"g", "go", "goto"} and tail.strip().isdigit():
        return SessionCommand("goto", int(tail.strip()) - 1)

    if text.isdigit():
        number = int(text)
        if 1 <= number <= option_count:
            return SessionCommand("select", number - 1)
        return None
    if len(text) == 1 and text in string.ascii_lowercase[:option_count]:
        return SessionCommand("select", ord(text) - ord("a"))
    return None


def format_clock(seconds: int) -> str:
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes}:{secs:02d}"


def run_session(
    session: Session,
    console: Console,
    input_provider: InputProvider,
    *,
    timer: Timer = time.monotonic,
    show_review: bool = True,
    categories: Sequence[Category] = (),
) -> RunOutcome:
    """Drive ``session`` interactively until submit, timeout or quit.

    Quitting discards the attempt: no result is produced.
    """

    carry = 0.0
    exit_action: ExitAction = "quit"

    while session.is_in_progress:
        _render_question(console, session)
        started = timer()
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted.[/]")
            exit_action = "quit"
            break

        carry += max(0.0, timer() - started)
        whole, carry = int(carry), carry - int(carry)
        for _ in range(whole):
            if session.tick() is not None:
                break
        if not session.is_in_progress:
            console.print("\n[bold red]Time is up.[/] Answers were submitted.")
            exit_action = "timeout"
            break

        command = parse_session_command(raw, len(session.current.options))
        if command is None:
            console.print("[red]Unrecognized command. Try again.[/]")
            continue
        action = _apply_command(command, session, console)
        if action is not None:
            exit_action = action
            break

    if exit_action == "quit":
        console.print("[bold yellow]Ending session without submission.[/]")
        return RunOutcome("quit", None)

    result = session.submit()
    render_result(console, result, categories=categories)
    review: tuple[ReviewItem, ...] = ()
    if show_review:
        review = tuple(session.enter_review())
        render_review(console, review)
    return RunOutcome(exit_action, result, review)


def _apply_command(
    command: SessionCommand, session: Session, console: Console
) -> Optional[ExitAction]:
    if command.type == "select" and command.value is not None:
        if session.select_option(command.value):
            console.print(f"Selected option [bold]{command.value + 1}[/].")
        return None
    if command.type == "next":
        session.next()
        return None
    if command.type == "prev":
        session.previous()
        return None
    if command.type == "goto" and command.value is not None:
        if not session.go_to(command.value):
            console.print(
                f"[red]There is no question {command.value + 1}.[/red]"
            )
        return None
    if command.type == "submit":
        return "submitted"
    if command.type == "quit":
        return "quit"
    return None


def _render_question(console: Console, session: Session) -> None:
    question = session.current
    header = Text.assemble(
        (f"Question {session.current_index + 1}", "bold cyan"),
        (f" / {session.total_questions}", "dim"),
        ("  ", ""),
        (
            format_clock(session.remaining_seconds),
            "bold red" if session.remaining_seconds < 60 else "green",
        ),
    )
    console.print()
    console.rule(header)
    console.print(Text(question.prompt, style="bold"))

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("Key", justify="center", style="cyan")
    table.add_column("Choice")

    selected = session.selected_for()
    for index, option in enumerate(question.options):
        marker = "•" if index == selected else " "
        row = Text(marker + " ")
        row += Text(option, style="bold green" if index == selected else "")
        table.add_row(f"{index + 1}", row)
    console.print(table)

    console.print(
        Text(
            f"Answered {session.answered_count()}/{session.total_questions} | "
            "Commands: 1-"
            f"{len(question.options)} (choose), n (next), p (prev), "
            "g <number> (jump), submit, quit",
            style="dim",
        )
    )


def render_result(
    console: Console,
    result: Result,
    *,
    categories: Sequence[Category] = (),
) -> None:
    console.print()
    console.rule(Text(result.title or "Test Result", style="bold magenta"))

    overview = Table(show_header=False, box=box.MINIMAL_DOUBLE_HEAD)
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Score", f"{result.score_percent}%")
    overview.add_row("Grade", grade_label(result.score_percent))
    overview.add_row("Total questions", str(result.total))
    overview.add_row("Correct", str(result.correct))
    overview.add_row("Wrong", str(result.wrong))
    overview.add_row("Skipped", str(result.skipped))
    overview.add_row("Accuracy", f"{accuracy_percent(result)}%")
    overview.add_row("Attempted", f"{attempt_rate(result)}%")
    overview.add_row("Time taken", format_clock(result.time_taken_seconds))
    overview.add_row(
        "Avg per question", f"{average_seconds_per_question(result)}s"
    )
    console.print(overview)

    breakdown = category_breakdown(result, categories)
    if len(breakdown) > 1 or categories:
        table = Table(title="Per category", box=box.SIMPLE)
        table.add_column("Category")
        table.add_column("Total", justify="right")
        table.add_column("Correct", justify="right")
        table.add_column("Wrong", justify="right")
        table.add_column("Accuracy", justify="right")
        for stat in breakdown:
            table.add_row(
                stat.name if stat.name != "Other" else stat.category_id,
                str(stat.total),
                str(stat.correct),
                str(stat.wrong),
                f"{stat.accuracy}%",
            )
        console.print(table)


def render_review(console: Console, items: Sequence[ReviewItem]) -> None:
    table = Table(title="Review", box=box.SIMPLE, expand=True)
    table.add_column("#", justify="right")
    table.add_column("Question", overflow="fold")
    table.add_column("Your answer")
    table.add_column("Correct answer")
    table.add_column("Result", justify="center")

    for item in items:
        if item.skipped:
            outcome = "skipped"
        else:
            outcome = "✅" if item.is_correct else "❌"
        table.add_row(
            str(item.index + 1),
            item.question.prompt,
            item.selected_text or "-",
            item.question.correct_option,
            outcome,
        )
    console.print(table)

    for item in items:
        if not item.question.explanation:
            continue
        console.print(
            Panel(
                item.question.explanation,
                title=f"Explanation for question {item.index + 1}",
                border_style="green" if item.is_correct else "red",
            )
        )


def render_trend(console: Console, trend: Trend) -> None:
    if not trend.entries:
        console.print(
            Panel("No results recorded yet.", title="History", style="yellow")
        )
        return
    table = Table(title="Recent results", box=box.SIMPLE)
    table.add_column("Taken")
    table.add_column("Title")
    table.add_column("Kind")
    table.add_column("Score", justify="right")
    table.add_column("")
    for result in trend.entries:
        table.add_row(
            result.taken_at.strftime("%Y-%m-%d %H:%M"),
            result.title or "-",
            result.test_kind.value,
            f"{result.score_percent}%",
            "█" * (result.score_percent // 10),
        )
    console.print(table)
    console.print(
        Text(
            f"Average over last {len(trend)}: {trend.mean:.1f}%",
            style="bold",
        )
    )
