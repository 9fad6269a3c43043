"""CLI handlers for ``mdquiz check``, ``mdquiz run`` and ``mdquiz config``."""

from __future__ import annotations

import argparse
import json
import random
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console

from ..bank.loader import load_document
from ..bank.pipeline import ParseResult, parse
from ..core import config_templates
from ..core import workspace as workspace_mod
from ..core.config_templates import ConfigTemplateError
from ..core.logging import configure_logger
from ..core.workspace import WorkspaceError
from ..engine.session import create_session
from ..errors import DocumentFormatError, DocumentLoadError, EmptyPoolError
from .config import (
    CONFIG_FILENAME,
    ConfigOverrides,
    LoadResult,
    QuizConfigError,
    load_config,
)
from .console import InputProvider, run_quiz_session

EXIT_OK = 0
EXIT_NO_QUESTIONS = 1
EXIT_ERROR = 2

_LOGGER_NAME = "md_quiz"


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "document",
        type=Path,
        help="Markdown question bank (.md or .markdown).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help=(
            "Path to a TOML config file (defaults to the workspace config "
            "directory)."
        ),
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root used for config and log files.",
    )
    parser.add_argument(
        "--log-level",
        help="Set the logging level for the run (defaults to INFO).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Echo log records to stderr.",
    )


def _build_check_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdquiz check",
        description=(
            "Parse a Markdown question bank and report accepted questions, "
            "rejected blocks and quality warnings."
        ),
        epilog=(
            "Exit status: 0 when at least one question is accepted, 1 when "
            "none are, 2 when the document cannot be read or parsed."
        ),
    )
    _add_common_arguments(parser)
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the parse report as JSON.",
    )
    return parser


def _build_run_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdquiz run",
        description="Take an interactive quiz drawn from a question bank.",
    )
    _add_common_arguments(parser)
    parser.add_argument(
        "--count",
        type=int,
        help="Number of questions to draw (defaults to quiz.question_count).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed the question draw for a reproducible quiz.",
    )
    parser.add_argument(
        "--no-repeat",
        action="store_true",
        help="Exit after the first quiz instead of offering a new round.",
    )
    return parser


def _load(
    args: argparse.Namespace, overrides: ConfigOverrides
) -> tuple[LoadResult, ParseResult]:
    load_result = load_config(
        config_path=args.config,
        overrides=overrides,
        workspace_path=args.workspace,
    )
    config = load_result.config
    logger, _ = configure_logger(
        _LOGGER_NAME,
        log_dir=load_result.layout.path_for("logs"),
        level=config.log_level,
        verbose=args.verbose,
        filename="mdquiz.log",
    )
    text = load_document(
        args.document,
        extensions=config.loader.extensions,
        max_bytes=config.loader.max_bytes,
        logger=logger.getChild("loader"),
    )
    result = parse(
        text,
        vocabulary=config.vocabulary,
        rules=config.rules,
        logger=logger.getChild("parser"),
    )
    return load_result, result


def check_main(argv: Sequence[str] | None = None) -> int:
    parser = _build_check_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    overrides = ConfigOverrides(log_level=args.log_level)

    try:
        _, result = _load(args, overrides)
    except (QuizConfigError, DocumentLoadError, DocumentFormatError) as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return EXIT_ERROR

    report = result.report
    if args.json:
        payload = {"document": str(args.document), **report.as_dict()}
        payload["accepted_ids"] = list(report.accepted_ids)
        sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False))
        sys.stdout.write("\n")
    else:
        _print_report(args.document, result)
    return EXIT_OK if result.pool else EXIT_NO_QUESTIONS


def _print_report(document: Path, result: ParseResult) -> None:
    report = result.report
    lines = [
        f"{document}:",
        f"  detected: {report.detected_blocks}",
        f"  accepted: {report.accepted_count}",
        f"  rejected: {report.rejected_count}",
        f"  warnings: {len(report.warnings)}",
    ]
    if report.rejections:
        lines.append("Rejected blocks:")
        for rejection in report.rejections:
            lines.append(
                f"  #{rejection.number} (line {rejection.start_line}): "
                f"{rejection.rule.value}={rejection.value!r} "
                f"{rejection.message}"
            )
    if report.warnings:
        lines.append("Warnings:")
        for warning in report.warnings:
            lines.append(f"  {warning.kind.value}: {warning.message}")
    sys.stdout.write("\n".join(lines) + "\n")


def run_main(
    argv: Sequence[str] | None = None,
    *,
    console: Optional[Console] = None,
    input_provider: Optional[InputProvider] = None,
) -> int:
    parser = _build_run_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    overrides = ConfigOverrides(
        question_count=args.count,
        seed=args.seed,
        log_level=args.log_level,
    )

    try:
        load_result, result = _load(args, overrides)
        settings = load_result.config.quiz
        session = create_session(
            result.pool,
            settings.question_count,
            rng=random.Random(settings.seed),
        )
    except EmptyPoolError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return EXIT_NO_QUESTIONS
    except (QuizConfigError, DocumentLoadError, DocumentFormatError) as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return EXIT_ERROR

    console = console or Console()

    def prompt() -> str:
        return console.input("[bold]> [/]")

    run_quiz_session(
        session,
        console,
        input_provider or prompt,
        allow_new_round=not args.no_repeat,
    )
    return EXIT_OK


def config_main(argv: Sequence[str] | None = None) -> int:
    parser = _build_config_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    return _handle_config_init(args)


def _build_config_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdquiz config",
        description="Manage the mdquiz configuration file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser(
        "init",
        help=f"Write the default {CONFIG_FILENAME} template.",
    )
    init_parser.add_argument(
        "--path",
        type=Path,
        help=(
            "Destination for the config TOML (defaults to the workspace "
            "config directory)."
        ),
    )
    init_parser.add_argument(
        "--workspace",
        type=Path,
        help=(
            "Workspace root override used when resolving the default config "
            "path."
        ),
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite the destination if a config already exists.",
    )
    return parser


def _handle_config_init(args: argparse.Namespace) -> int:
    try:
        target = _resolve_config_target(args)
    except WorkspaceError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    template = config_templates.get_template("quizzer")
    try:
        written = template.write(target, overwrite=args.force)
    except ConfigTemplateError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    sys.stdout.write(f"Wrote mdquiz config to {written}\n")
    return 0


def _resolve_config_target(args: argparse.Namespace) -> Path:
    if args.path is not None:
        candidate = args.path.expanduser()
        if not candidate.is_absolute():
            candidate = (Path.cwd() / candidate).resolve()
        return candidate

    layout = workspace_mod.ensure_workspace(path=args.workspace)
    return layout.path_for("config") / CONFIG_FILENAME


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(run_main())
