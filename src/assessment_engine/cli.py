"""``assess``: one console script that routes to the command modules."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from importlib import import_module, metadata
from typing import Callable, Dict, List, Optional, Sequence

DIST_NAME = "assessment-engine"

EntryPoint = Callable[[List[str]], Optional[int]]


@dataclass(frozen=True)
class Command:
    """A subcommand backed by ``main``-style function ``target``.

    ``target`` reads ``"package.module:function"`` and is imported lazily so
    ``assess --help`` does not pay for Rich or the session machinery.
    """

    name: str
    summary: str
    target: str
    interactive: bool = False

    def load(self) -> EntryPoint:
        module_name, _, func_name = self.target.partition(":")
        return getattr(import_module(module_name), func_name)

    def run(self, argv: Sequence[str]) -> int:
        return _invoke_main(self.load(), f"assess {self.name}", argv)


COMMANDS: Dict[str, Command] = {
    command.name: command
    for command in (
        Command(
            "init",
            "Bootstrap the assessment workspace.",
            "assessment_engine.workspace.cli:main",
        ),
        Command(
            "ingest",
            "Import questions from outline text, JSON records or a table.",
            "assessment_engine.ingest.cli:main",
        ),
        Command(
            "take",
            "Run a timed test sampled from the question pool.",
            "assessment_engine.session.cli:take_main",
            interactive=True,
        ),
        Command(
            "history",
            "Show recent results and the trailing average.",
            "assessment_engine.session.cli:history_main",
        ),
    )
}


def format_command_table() -> str:
    width = max(len(name) for name in COMMANDS)
    rows = ["Available commands:"]
    for command in COMMANDS.values():
        tag = " (interactive)" if command.interactive else ""
        rows.append(f"  {command.name:<{width}}  {command.summary}{tag}")
    return "\n".join(rows)


def format_usage() -> str:
    return (
        "Usage: assess <command> [args...]\n"
        "Run `assess list` for commands or `assess help <name>` for details."
        "\n\n" + format_command_table()
    )


def _out(text: str) -> None:
    sys.stdout.write(text + "\n")


def _err(text: str) -> None:
    sys.stderr.write(text + "\n")


def _version(_: Sequence[str]) -> int:
    try:
        _out(metadata.version(DIST_NAME))
    except metadata.PackageNotFoundError:
        _out("unknown")
    return 0


def _list(_: Sequence[str]) -> int:
    _out(format_command_table())
    return 0


def _usage(_: Sequence[str]) -> int:
    _out(format_usage())
    return 0


def _help(argv: Sequence[str]) -> int:
    if not argv:
        return _usage(argv)
    command = COMMANDS.get(argv[0])
    if command is None:
        return _unknown(argv[0])
    _out(f"{command.name}: {command.summary}")
    _out(f"Run `assess {command.name} --help` for its options.")
    return 0


def _unknown(name: str) -> int:
    _err(f"Unknown command '{name}'.")
    _err(format_command_table())
    return 2


_BUILTINS: Dict[str, Callable[[Sequence[str]], int]] = {
    "-h": _usage,
    "--help": _usage,
    "-V": _version,
    "--version": _version,
    "version": _version,
    "list": _list,
    "help": _help,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        _out(format_usage())
        return 2

    name, rest = args[0], args[1:]
    builtin = _BUILTINS.get(name)
    if builtin is not None:
        return builtin(rest)
    command = COMMANDS.get(name)
    if command is None:
        return _unknown(name)
    return command.run(rest)


def _invoke_main(func: EntryPoint, prog: str, argv: Sequence[str]) -> int:
    """Call ``func(argv)`` with ``sys.argv`` set and map exits to codes.

    argparse reports usage errors and ``--help`` through ``SystemExit``;
    those become return codes so the dispatcher never exits mid-flight.
    """

    args = list(argv)
    saved = sys.argv
    sys.argv = [prog, *args]
    try:
        result = func(args)
    except SystemExit as exc:
        if exc.code is None or isinstance(exc.code, int):
            return exc.code or 0
        _err(str(exc.code))
        return 1
    finally:
        sys.argv = saved
    return result if isinstance(result, int) else 0


if __name__ == "__main__":  # pragma: no cover - manual invocation guard
    raise SystemExit(main())
