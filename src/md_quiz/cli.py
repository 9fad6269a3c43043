"""Unified ``mdquiz`` entry point."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from importlib import import_module, metadata
from typing import Callable, Mapping, Optional, Sequence


CommandHandler = Callable[[Sequence[str]], int]


@dataclass(frozen=True)
class CommandSpec:
    """Represents an mdquiz subcommand."""

    name: str
    summary: str
    handler: CommandHandler
    is_interactive: bool = False


def _module_command(module_name: str, func_name: str) -> CommandHandler:
    def handler(argv: Sequence[str]) -> int:
        module = import_module(module_name)
        return _invoke_main(getattr(module, func_name), argv)

    return handler


_COMMAND_SPECS: Sequence[CommandSpec] = (
    CommandSpec(
        name="init",
        summary="Create the mdquiz workspace (config and logs).",
        handler=_module_command("md_quiz.workspace.cli", "main"),
    ),
    CommandSpec(
        name="check",
        summary="Validate a Markdown question bank and report problems.",
        handler=_module_command("md_quiz.quizzer._main", "check_main"),
    ),
    CommandSpec(
        name="run",
        summary="Take a quiz drawn from a Markdown question bank.",
        is_interactive=True,
        handler=_module_command("md_quiz.quizzer._main", "run_main"),
    ),
    CommandSpec(
        name="config",
        summary="Write the default mdquiz.toml configuration.",
        handler=_module_command("md_quiz.quizzer._main", "config_main"),
    ),
)

COMMANDS: Mapping[str, CommandSpec] = {
    spec.name: spec for spec in _COMMAND_SPECS
}


def format_command_table() -> str:
    """Return a formatted command table for help output."""

    width = max(len(spec.name) for spec in _COMMAND_SPECS)
    lines = ["Available commands:"]
    for spec in _COMMAND_SPECS:
        suffix = " (interactive)" if spec.is_interactive else ""
        lines.append(f"  {spec.name.ljust(width)}  {spec.summary}{suffix}")
    return "\n".join(lines)


def format_usage() -> str:
    parts = [
        "Usage: mdquiz <command> [args...]",
        "Run `mdquiz list` for commands or `mdquiz help <name>` for details.",
        "",
        format_command_table(),
    ]
    return "\n".join(parts)


def _print(
    text: str, *, stream: Optional[Callable[[str], None]] = None
) -> None:
    target = stream if stream is not None else sys.stdout.write
    if text:
        target(text + "\n")


def _handle_version() -> int:
    try:
        version = metadata.version("md-quiz")
    except metadata.PackageNotFoundError:
        version = "unknown"
    _print(version)
    return 0


def _handle_help(argv: Sequence[str]) -> int:
    if not argv:
        _print(format_usage())
        return 0

    spec = COMMANDS.get(argv[0])
    if not spec:
        _print(f"Unknown command '{argv[0]}'.", stream=sys.stderr.write)
        _print(format_command_table(), stream=sys.stderr.write)
        return 2

    _print(f"{spec.name}: {spec.summary}")
    _print(f"Run `mdquiz {spec.name} --help` for CLI-specific options.")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(argv if argv is not None else sys.argv[1:])

    if not args:
        _print(format_usage())
        return 2

    head, *tail = args

    if head in ("-h", "--help"):
        _print(format_usage())
        return 0

    if head in ("-V", "--version", "version"):
        return _handle_version()

    if head == "list":
        _print(format_command_table())
        return 0

    if head == "help":
        return _handle_help(tail)

    spec = COMMANDS.get(head)
    if spec:
        return spec.handler(tail)

    _print(f"Unknown command '{head}'.", stream=sys.stderr.write)
    _print(format_command_table(), stream=sys.stderr.write)
    return 2


def _invoke_main(func: Callable[..., object], argv: Sequence[str]) -> int:
    try:
        result = func(list(argv))
    except SystemExit as exc:
        return _normalize_system_exit(exc)
    if isinstance(result, int):
        return result
    return 0


def _normalize_system_exit(exc: SystemExit) -> int:
    code = exc.code
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    _print(str(code), stream=sys.stderr.write)
    return 1


if __name__ == "__main__":  # pragma: no cover - manual invocation guard
    raise SystemExit(main())
