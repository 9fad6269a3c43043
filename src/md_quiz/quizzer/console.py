"""Rich-powered console loop driving a :class:`QuizSession`.

The runner renders each question, reads one command per prompt from an
injected input provider and forwards answers to the session engine. Engine
errors are shown to the user and the loop continues; only an explicit quit
or the end of input stops it early.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Collection, Literal, Optional

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..engine.results import ResultsReport
from ..engine.session import QuestionView, QuizSession
from ..errors import InvalidStateError, MalformedAnswerError, UnknownOptionError

InputProvider = Callable[[], str]
ExitAction = Literal["completed", "quit"]
CommandType = Literal["answer", "next", "quit", "new"]


@dataclass(frozen=True)
class RunnerCommand:
    """Normalized user command parsed from console input."""

    type: CommandType
    letters: str = ""


@dataclass(frozen=True)
class RunnerResult:
    """Return value from ``run_quiz_session``."""

    reports: tuple[ResultsReport, ...]
    exit_action: ExitAction

    @property
    def last_report(self) -> Optional[ResultsReport]:
        return self.reports[-1] if self.reports else None


def parse_runner_command(
    raw: Optional[str], option_letters: Collection[str] = ()
) -> Optional[RunnerCommand]:
    """Parse raw user input into a structured command.

    Letters are uppercased with spaces and commas removed, so ``"a, c"``
    submits ``"AC"``. Anything else that is not a known keyword yields an
    answer command and is left for the engine to reject. A one-letter
    shortcut that is also one of ``option_letters`` is read as an answer;
    the long form (``next``, ``quit``, ``new``) still works.
    """

    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    lowered = text.lower()
    if len(text) == 1 and text.upper() in option_letters:
        return RunnerCommand("answer", text.upper())
    if lowered in {"n", "next"}:
        return RunnerCommand("next")
    if lowered in {"q", "quit", "exit"}:
        return RunnerCommand("quit")
    if lowered in {"r", "new"}:
        return RunnerCommand("new")
    letters = text.replace(",", "").replace(" ", "").upper()
    return RunnerCommand("answer", letters)


def run_quiz_session(
    session: QuizSession,
    console: Console,
    input_provider: InputProvider,
    *,
    allow_new_round: bool = True,
) -> RunnerResult:
    """Run ``session`` interactively until the user quits or stops."""

    reports: list[ResultsReport] = []
    while True:
        view = session.current_question()
        action = _run_round(session, view, console, input_provider)
        if action == "quit":
            return RunnerResult(tuple(reports), "quit")

        report = session.results()
        reports.append(report)
        _render_summary(console, report)
        if not allow_new_round:
            return RunnerResult(tuple(reports), "completed")
        if not _prompt_new_round(console, input_provider):
            return RunnerResult(tuple(reports), "completed")
        session.start_new_quiz()


def _run_round(
    session: QuizSession,
    view: QuestionView,
    console: Console,
    input_provider: InputProvider,
) -> ExitAction:
    current: Optional[QuestionView] = view
    while current is not None:
        _render_question(console, session, current)
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted.[/]")
            return "quit"
        command = parse_runner_command(raw, current.question.option_letters)
        if command is None:
            console.print("[red]Unrecognized command. Try again.[/]")
            continue
        if command.type == "quit":
            console.print("\n[bold yellow]Ending quiz without results.[/]")
            return "quit"
        if command.type == "new":
            console.print(
                "[red]A new quiz can only be started after this one ends.[/]"
            )
            continue
        try:
            if command.type == "answer":
                _submit(session, console, command.letters)
            else:
                current = session.advance()
        except (
            InvalidStateError,
            MalformedAnswerError,
            UnknownOptionError,
        ) as exc:
            console.print(f"[red]{exc}[/red]")
    return "completed"


def _submit(session: QuizSession, console: Console, letters: str) -> None:
    outcome = session.submit_answer(letters)
    question = session.selected[outcome.question_index]
    chosen = ", ".join(question.ordered(outcome.selected))
    console.print(f"Recorded answer [bold]{chosen}[/].")


def _prompt_new_round(console: Console, input_provider: InputProvider) -> bool:
    while True:
        console.print(
            Text("Commands: r (new quiz), q (quit)", style="dim")
        )
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            return False
        command = parse_runner_command(raw)
        if command is not None and command.type == "new":
            return True
        if command is not None and command.type == "quit":
            return False
        console.print("[red]Unrecognized command. Try again.[/]")


def _render_question(
    console: Console, session: QuizSession, view: QuestionView
) -> None:
    question = view.question
    header = Text.assemble(
        (f"Question {view.position}", "bold cyan"),
        (f" / {view.total}", "dim"),
    )
    console.print()
    console.rule(header)
    console.print(Text(question.content, style="bold"))
    if question.is_multi_select:
        console.print(
            Text("Select every correct option.", style="italic yellow")
        )

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("Key", justify="center", style="cyan")
    table.add_column("Option")

    selected = session.answers[view.index] or frozenset()
    for letter, text in question.options.items():
        chosen = letter in selected
        row_text = Text(("*" if chosen else " ") + " ")
        option_text = Text(text)
        if chosen:
            option_text.stylize("bold green")
        row_text += option_text
        table.add_row(letter, row_text)
    console.print(table)

    stats = session.stats()
    letters = ", ".join(question.option_letters)
    next_key = "next" if "N" in question.option_letters else "n"
    quit_key = "quit" if "Q" in question.option_letters else "q"
    next_hint = (
        f"{next_key} (finish)" if view.is_last else f"{next_key} (next)"
    )
    console.print(
        Text(
            f"Answered {stats.answered}/{view.total} | "
            f"Commands: letters [{letters}], {next_hint}, {quit_key} (quit)",
            style="dim",
        )
    )


def _render_summary(console: Console, report: ResultsReport) -> None:
    console.print()
    console.rule(Text("Quiz Summary", style="bold magenta"))

    overview = Table(
        show_header=False,
        box=box.MINIMAL_DOUBLE_HEAD,
        expand=False,
    )
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Score", f"{report.score}%")
    overview.add_row(
        "Correct", f"{report.correct_count}/{report.total_questions}"
    )
    overview.add_row("Answered", str(report.answered_count))
    overview.add_row("Duration", _format_duration(report.duration_seconds))
    console.print(overview)

    responses = Table(title="Responses", box=box.SIMPLE, expand=True)
    responses.add_column("#", justify="right")
    responses.add_column("Question", overflow="fold")
    responses.add_column("Your answer")
    responses.add_column("Correct answer")
    responses.add_column("Result", justify="center")
    for detail in report.details:
        responses.add_row(
            str(detail.position),
            detail.question.title,
            ", ".join(detail.chosen) if detail.chosen else "-",
            ", ".join(detail.correct),
            "[green]correct[/]" if detail.is_correct else "[red]wrong[/]",
        )
    console.print(responses)


def _format_duration(seconds: int) -> str:
    minutes, secs = divmod(max(0, seconds), 60)
    if minutes:
        return f"{minutes}m {secs:02d}s"
    return f"{secs}s"
