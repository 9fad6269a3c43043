from __future__ import annotations

import logging

import pytest

from md_quiz.bank import ValidationRules, Vocabulary, parse
from md_quiz.bank.report import ValidationRule, WarningKind
from md_quiz.engine import create_session
from md_quiz.errors import DocumentFormatError

EXAMPLE = '## Question 001\n\nText\n\nA. x\nB. y\n\n<control message="A">'


def test_reference_example_parses_with_relaxed_content_rule():
    result = parse(EXAMPLE, rules=ValidationRules(min_content_length=1))

    (record,) = result.pool
    assert record.id == "001"
    assert dict(record.options) == {"A": "x", "B": "y"}
    assert record.correct_answers == ("A",)

    session = create_session(result.pool, 1)
    assert session.submit_answer("A").is_correct is True
    assert session.submit_answer("B").is_correct is False


def test_reference_example_body_is_too_short_by_default():
    result = parse(EXAMPLE)

    assert result.pool == ()
    (rejection,) = result.report.rejections
    assert rejection.rule is ValidationRule.CONTENT_TOO_SHORT
    assert rejection.value == 4
    assert rejection.number == "001"


def test_byte_order_mark_does_not_hide_first_heading():
    text = (
        "\ufeff## Question 1\r\n\r\nWhat is the capital of France?\r\n\r\n"
        "**A.** *Paris*\r\nB) Rome\r\n"
        '<as-button message="B" inquire="A">\r\n'
    )

    result = parse(text)

    (record,) = result.pool
    assert record.id == "001"
    assert dict(record.options) == {"A": "Paris", "B": "Rome"}
    assert record.correct_answers == ("B", "A")
    assert result.report.detected_blocks == 1


def test_byte_order_mark_keeps_every_block_counted(bank):
    bank.title = "\ufeff## Question 1"
    bank.add_raw("Body of the first question.\n\nA. one\nB. two")
    bank.add_raw('<as-button message="A"></as-button>')
    bank.add_many(2, start=2)

    result = parse(bank.render())

    assert result.report.detected_blocks == 3
    assert [r.id for r in result.pool] == ["001", "002", "003"]
    assert result.pool[0].options["B"] == "two"


def test_mixed_document_counts(bank):
    bank.add_many(3)
    bank.add(4, options={"A": "Only one"}, answer="A")
    bank.add(5, content="Which are prime numbers?", options={
        "A": "4", "B": "5", "C": "7", "D": "9",
    }, answer="B", additional="C")
    result = parse(bank.render())
    report = result.report

    assert report.detected_blocks == 5
    assert report.accepted_count == 4
    assert report.rejected_count == 1
    assert report.accepted_count + report.rejected_count == (
        report.detected_blocks
    )
    assert [r.id for r in result.pool] == ["001", "002", "003", "005"]
    assert report.accepted_ids == ("001", "002", "003", "005")
    assert report.success_rate == pytest.approx(0.8)
    assert report.rejections[0].number == "4"
    assert result.pool[-1].correct_answers == ("B", "C")


def test_accepted_answers_are_subset_of_options(bank):
    bank.add_many(4)
    bank.add(5, answer="AC", options={"A": "1", "B": "2", "C": "3"})

    result = parse(bank.render())

    assert result.pool
    for record in result.pool:
        assert record.correct_answers
        assert set(record.correct_answers) <= set(record.options)


def test_parse_is_idempotent(bank):
    bank.add_many(3).add(9, answer="Z")
    text = bank.render()

    first = parse(text)
    second = parse(text)

    assert first.report == second.report
    assert [
        (r.id, r.content, dict(r.options), r.correct_answers)
        for r in first.pool
    ] == [
        (r.id, r.content, dict(r.options), r.correct_answers)
        for r in second.pool
    ]


def test_every_block_rejected_yields_empty_pool(bank):
    bank.add(1, answer="Q").add(2, options={"A": "x", "C": "y"})

    result = parse(bank.render())

    assert result.pool == ()
    assert result.report.detected_blocks == 2
    assert result.report.accepted_count == 0
    assert [r.rule for r in result.report.rejections] == [
        ValidationRule.UNKNOWN_CORRECT_ANSWER,
        ValidationRule.MISSING_REQUIRED_OPTION,
    ]


def test_document_without_structure_raises():
    with pytest.raises(DocumentFormatError) as excinfo:
        parse("# Notes\n\nJust some prose without questions.\n")

    assert set(excinfo.value.missing) == {
        "heading",
        "control_marker",
        "option",
    }


def test_numbering_problems_are_warnings_not_rejections(bank):
    bank.add_many(2).add_many(1, start=2).add_many(1, start=7)

    result = parse(bank.render())

    assert len(result.pool) == 4
    kinds = [w.kind for w in result.report.warnings]
    assert WarningKind.DUPLICATE_NUMBER in kinds
    assert WarningKind.NON_SEQUENTIAL_NUMBER in kinds
    assert [r.id for r in result.pool] == ["001", "002", "002", "007"]


def test_custom_vocabulary_is_honoured():
    text = "\n".join(
        [
            "## Item 3",
            "Which colour is the sky?",
            "A. Blue",
            "B. Green",
            '<quiz answer="A"></quiz>',
        ]
    )
    vocab = Vocabulary(heading_keywords=("Item",), answer_attribute="answer")

    result = parse(text, vocabulary=vocab)

    assert [r.title for r in result.pool] == ["Item 3"]


def test_parse_logs_rejections_and_summary(bank, caplog):
    caplog.set_level(logging.DEBUG, logger="md_quiz")
    bank.add_many(1).add(2, answer=None)

    parse(bank.render())

    messages = {record.getMessage(): record for record in caplog.records}
    rejected = messages["Rejected question block"]
    assert rejected.levelno == logging.WARNING
    assert rejected.rule == "missing_control_marker"
    summary = messages["Parsed question document"]
    assert summary.accepted == 1
    assert summary.rejected == 1
    assert "Accepted question" in messages


def test_report_as_dict_is_json_ready(bank):
    bank.add_many(1).add(2, answer="X")

    payload = parse(bank.render()).report.as_dict()

    assert payload["detected_blocks"] == 2
    assert payload["rejections"][0]["violations"][0]["rule"] == (
        "unknown_correct_answer"
    )
    assert payload["rejections"][0]["violations"][0]["value"] == "X"
