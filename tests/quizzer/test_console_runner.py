from __future__ import annotations

import pytest
from rich.console import Console

from fixtures import ScriptedRandom

from md_quiz.bank.models import QuestionRecord
from md_quiz.engine import SessionPhase, create_session
from md_quiz.quizzer.console import (
    RunnerCommand,
    parse_runner_command,
    run_quiz_session,
)


def make_provider(commands: list[str]):
    iterator = iter(commands)

    def _provider() -> str:
        return next(iterator)

    return _provider


def make_session(answers=(("A",), ("B", "C"))):
    pool = tuple(
        QuestionRecord(
            id=f"{idx:03d}",
            title=f"Question {idx}",
            content=f"Prompt number {idx}?",
            options={
                "A": f"Alpha {idx}",
                "B": f"Beta {idx}",
                "C": f"Gamma {idx}",
            },
            correct_answers=correct,
            number=idx,
        )
        for idx, correct in enumerate(answers, start=1)
    )
    return create_session(pool, len(pool), rng=ScriptedRandom([0]))


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, None),
        ("   ", None),
        ("n", RunnerCommand("next")),
        ("NEXT", RunnerCommand("next")),
        ("q", RunnerCommand("quit")),
        ("exit", RunnerCommand("quit")),
        ("r", RunnerCommand("new")),
        ("new", RunnerCommand("new")),
        ("a", RunnerCommand("answer", "A")),
        ("b, c", RunnerCommand("answer", "BC")),
        (" a c ", RunnerCommand("answer", "AC")),
        ("1", RunnerCommand("answer", "1")),
    ],
)
def test_parse_runner_command(raw, expected):
    assert parse_runner_command(raw) == expected


def test_run_quiz_session_completes_and_summarises() -> None:
    console = Console(record=True, width=80, force_terminal=True)
    session = make_session()
    provider = make_provider(["a", "n", "b,c", "n", "q"])

    result = run_quiz_session(session, console, provider)

    assert result.exit_action == "completed"
    report = result.last_report
    assert report is not None
    assert report.score == 100
    assert report.correct_count == 2
    assert session.phase is SessionPhase.COMPLETED
    rendered = console.export_text()
    assert "Question 1 / 2" in rendered
    assert "Prompt number 1?" in rendered
    assert "Select every correct option." in rendered
    assert "Recorded answer B, C." in rendered
    assert "Quiz Summary" in rendered
    assert "100%" in rendered
    assert "Responses" in rendered


def test_invalid_letters_are_reported_and_loop_continues() -> None:
    console = Console(record=True, width=80, force_terminal=True)
    session = make_session(answers=(("A",),))
    provider = make_provider(["z", "1", "?", "a", "n", "q"])

    result = run_quiz_session(session, console, provider)

    assert result.exit_action == "completed"
    assert result.last_report.score == 100
    rendered = console.export_text()
    assert "Option Z is not available" in rendered
    assert "uppercase letters A-Z" in rendered


def test_unanswered_questions_show_in_summary() -> None:
    console = Console(record=True, width=80, force_terminal=True)
    session = make_session()
    provider = make_provider(["n", "a", "n", "n", "q"])

    result = run_quiz_session(session, console, provider)

    report = result.last_report
    assert report.answered_count == 1
    assert report.correct_count == 1
    assert report.score == 50
    rendered = console.export_text()
    assert "Cannot advance while the quiz is not_started." in rendered
    assert "50%" in rendered


def test_quit_ends_without_results() -> None:
    console = Console(record=True, width=80, force_terminal=True)
    session = make_session()
    provider = make_provider(["a", "quit"])

    result = run_quiz_session(session, console, provider)

    assert result.exit_action == "quit"
    assert result.reports == ()
    assert result.last_report is None
    assert session.phase is SessionPhase.IN_PROGRESS
    rendered = console.export_text()
    assert "Ending quiz without results." in rendered
    assert "Quiz Summary" not in rendered


def test_end_of_input_interrupts_session() -> None:
    console = Console(record=True, width=80, force_terminal=True)
    session = make_session()

    result = run_quiz_session(session, console, make_provider(["a"]))

    assert result.exit_action == "quit"
    assert "Session interrupted." in console.export_text()


def test_new_command_rejected_mid_round() -> None:
    console = Console(record=True, width=80, force_terminal=True)
    session = make_session(answers=(("A",),))
    provider = make_provider(["r", "a", "n", "q"])

    result = run_quiz_session(session, console, provider)

    assert result.exit_action == "completed"
    assert "only be started after this one ends" in console.export_text()


def test_new_round_starts_fresh_quiz() -> None:
    console = Console(record=True, width=80, force_terminal=True)
    session = make_session(answers=(("A",),))
    provider = make_provider(["a", "n", "what", "r", "b", "n"])

    result = run_quiz_session(session, console, provider)

    assert result.exit_action == "completed"
    assert [report.score for report in result.reports] == [100, 0]
    rendered = console.export_text()
    assert rendered.count("Quiz Summary") == 2
    assert "Unrecognized command. Try again." in rendered


def test_new_round_disabled_returns_after_first_summary() -> None:
    console = Console(record=True, width=80, force_terminal=True)
    session = make_session(answers=(("A",),))
    provider = make_provider(["a", "n"])

    result = run_quiz_session(
        session, console, provider, allow_new_round=False
    )

    assert result.exit_action == "completed"
    assert len(result.reports) == 1
    assert "Commands: r (new quiz)" not in console.export_text()


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("n", RunnerCommand("answer", "N")),
        ("Q", RunnerCommand("answer", "Q")),
        ("next", RunnerCommand("next")),
        ("quit", RunnerCommand("quit")),
        ("r", RunnerCommand("new")),
    ],
)
def test_option_letters_take_priority_over_shortcuts(raw, expected):
    assert parse_runner_command(raw, ("M", "N", "O", "P", "Q")) == expected


def test_single_letter_answers_matching_shortcuts() -> None:
    console = Console(record=True, width=80, force_terminal=True)
    record = QuestionRecord(
        id="001",
        title="Question 1",
        content="Which letter comes after M?",
        options={"M": "Em", "N": "En", "Q": "Queue"},
        correct_answers=("N",),
        number=1,
    )
    session = create_session((record,), 1, rng=ScriptedRandom([0]))
    provider = make_provider(["n", "next", "q"])

    result = run_quiz_session(session, console, provider)

    assert result.exit_action == "completed"
    assert result.last_report.score == 100
    rendered = console.export_text()
    assert "Recorded answer N." in rendered
    assert "next (finish), quit (quit)" in rendered
