from __future__ import annotations

import pytest

from md_quiz.bank.scanner import (
    LineKind,
    ScanState,
    Vocabulary,
    classify_line,
    count_structure,
    find_control_markers,
    match_heading,
    match_option,
    scan_blocks,
    split_body,
    strip_emphasis,
)


SAMPLE = "\n".join(
    [
        "# Title",
        "intro paragraph",
        "## Question 1",
        "Body one",
        "A. x",
        "B. y",
        '<as-button message="A">',
        "## Question 2",
        "Body two",
        "---",
        "stray text outside any block",
        "## Question 3",
    ]
)


@pytest.mark.parametrize(
    "line, expected",
    [
        ("", LineKind.BLANK),
        ("   ", LineKind.BLANK),
        ("## Question 3", LineKind.HEADING),
        ("## Pregunta 12", LineKind.HEADING),
        ("##   question   4  ", LineKind.HEADING),
        ("## Question", LineKind.OTHER_HEADING),
        ("### Question 5", LineKind.OTHER_HEADING),
        ("# Notes", LineKind.OTHER_HEADING),
        ("---", LineKind.RULE),
        ("-----  ", LineKind.RULE),
        ('<as-button message="A"></as-button>', LineKind.CONTROL),
        ("A) x", LineKind.OPTION),
        ("**C.** bold letter", LineKind.OPTION),
        ("Plain text", LineKind.TEXT),
        ('<img src="diagram.png">', LineKind.TEXT),
    ],
)
def test_classify_line(line, expected):
    assert classify_line(line) is expected


def test_match_heading_returns_keyword_and_number():
    assert match_heading("## Question 001") == ("Question", "001")
    assert match_heading("## pregunta 7") == ("pregunta", "7")
    assert match_heading("Question 1") is None
    assert match_heading("## Question 1a") is None


def test_custom_vocabulary_heading_keywords():
    vocab = Vocabulary(heading_keywords=("Item", "Frage"))

    assert match_heading("## Item 5", vocab) == ("Item", "5")
    assert match_heading("## Frage 6", vocab) == ("Frage", "6")
    assert match_heading("## Question 5", vocab) is None


def test_vocabulary_requires_keyword():
    with pytest.raises(ValueError):
        Vocabulary(heading_keywords=("  ",))


@pytest.mark.parametrize(
    "line, expected",
    [
        ("A. Paris", ("A", "Paris")),
        ("B) London", ("B", "London")),
        ("  C.   spaced out  ", ("C", "spaced out")),
        ("**A.** Paris", ("A", "Paris")),
        ("**B)** *London*", ("B", "London")),
        ("*D*. **Rome**", ("D", "Rome")),
        ("a. lowercase", None),
        ("A.NoSpace", None),
        ("Apple pie", None),
        ("AB. two letters", None),
        ('B. Rome <as-button message="A">', ("B", "Rome")),
        ('B) Rome <as-button message="A"></as-button>', ("B", "Rome")),
        ("C. Wrap it in a <div> element", ("C", "Wrap it in a <div> element")),
    ],
)
def test_match_option(line, expected):
    assert match_option(line) == expected


def test_strip_emphasis():
    assert strip_emphasis("**bold** and *italic*") == "bold and italic"
    assert strip_emphasis("  plain  ") == "plain"


def test_find_control_markers_reads_attributes():
    markers = find_control_markers(
        '<as-button message="BC" inquire="D"></as-button>'
    )

    assert len(markers) == 1
    assert markers[0].tag == "as-button"
    assert markers[0].answer == "BC"
    assert markers[0].additional == "D"


def test_find_control_markers_multiple_on_one_line():
    markers = find_control_markers('<x message="A"> then <y message="B">')

    assert [m.answer for m in markers] == ["A", "B"]
    assert markers[0].additional is None


def test_find_control_markers_ignores_prefixed_attribute():
    assert find_control_markers('<x data-message="A">') == []


def test_find_control_markers_custom_attributes():
    vocab = Vocabulary(answer_attribute="answer", additional_attribute="extra")

    markers = find_control_markers('<quiz answer="B" extra="C">', vocab)

    assert markers[0].answer == "B"
    assert markers[0].additional == "C"
    assert find_control_markers('<quiz message="B">', vocab) == []


def test_scan_blocks_partitions_document():
    blocks = scan_blocks(SAMPLE)

    assert [b.number for b in blocks] == ["1", "2", "3"]
    assert [b.index for b in blocks] == [1, 2, 3]
    assert [b.start_line for b in blocks] == [3, 8, 12]

    first, second, third = blocks
    assert first.lines == (
        "Body one",
        "A. x",
        "B. y",
        '<as-button message="A">',
    )
    assert first.final_state is ScanState.READING_CONTROL
    assert second.lines == ("Body two",)
    assert second.final_state is ScanState.READING_BODY
    assert third.lines == ()


def test_scan_blocks_other_heading_ends_block():
    text = "\n".join(
        [
            "## Question 1",
            "Body",
            "A. x",
            "### Explanation",
            "B. not part of the block",
        ]
    )

    (block,) = scan_blocks(text)

    assert block.lines == ("Body", "A. x")
    assert block.final_state is ScanState.READING_OPTIONS


def test_scan_blocks_without_headings():
    assert scan_blocks("Just prose\nA. x\n") == ()


def test_block_raw_rebuilds_heading():
    (block,) = scan_blocks("## Pregunta 4\nBody")

    assert block.raw == "## Pregunta 4\nBody"


def test_split_body_without_options():
    split = split_body(["Body text here", "", "more body"])

    assert split.reason == "end"
    assert split.boundary == 3
    assert split.text == "Body text here\n\nmore body"


def test_split_body_stops_at_option_like_body_text():
    lines = [
        "Consider the following statements:",
        "A. the first statement",
        "B. the second statement",
        "Which are true?",
        "A. Only A",
        '<as-button message="A">',
    ]

    split = split_body(lines)

    assert split.reason == "option"
    assert split.boundary == 1
    assert split.text == "Consider the following statements:"


def test_split_body_stops_at_first_of_multiple_control_markers():
    lines = [
        "Body before the marker",
        '<b message="A">',
        "A. x",
        '<b message="B">',
    ]

    split = split_body(lines)

    assert split.reason == "control"
    assert split.boundary == 1
    assert split.text == "Body before the marker"


def test_split_body_emphasis_wrapped_letter_is_boundary():
    split = split_body(["  Question body  ", "", "**A.** Paris"])

    assert split.reason == "option"
    assert split.boundary == 2
    assert split.text == "Question body"


def test_split_body_empty_block():
    split = split_body([])

    assert split.text == ""
    assert split.boundary == 0
    assert split.reason == "end"


def test_count_structure():
    counts = count_structure(SAMPLE)

    assert counts.headings == 3
    assert counts.control_markers == 1
    assert counts.options == 2


def test_count_structure_option_sharing_line_with_marker():
    counts = count_structure(
        "## Question 1\nBody\nA. Paris\nB. Rome <as-button message=\"A\">\n"
    )

    assert counts.control_markers == 1
    assert counts.options == 2


def test_match_option_keeps_marker_with_custom_attribute():
    vocab = Vocabulary(answer_attribute="data-answer")

    assert match_option('A. x <as-button message="A">', vocab) == (
        "A",
        'x <as-button message="A">',
    )
    assert match_option('A. x <q-btn data-answer="A">', vocab) == ("A", "x")
