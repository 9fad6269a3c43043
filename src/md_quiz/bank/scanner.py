"""Line-oriented scanner that partitions a Markdown document into blocks.

Each line is classified on its own (heading, option, control marker, ...)
and a small state machine walks the classified lines:

``SEEKING_HEADING -> READING_BODY -> READING_OPTIONS -> READING_CONTROL``

A block opens at a question heading and closes at the next question
heading, any other Markdown heading, a section rule, or the end of the
text. Lines outside blocks are ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import Iterable, Sequence

__all__ = [
    "ControlMarker",
    "DEFAULT_VOCABULARY",
    "LineKind",
    "BodySplit",
    "QuestionBlock",
    "ScanState",
    "StructureCounts",
    "Vocabulary",
    "classify_line",
    "count_structure",
    "find_control_markers",
    "match_heading",
    "match_option",
    "scan_blocks",
    "split_body",
    "strip_emphasis",
]

_OPTION_RE = re.compile(
    r"^\s*(?:\*{1,2})?([A-Z])(?:\*{1,2})?[.)](?:\*{1,2})?\s+(.*\S)\s*$"
)
_RULE_RE = re.compile(r"^\s*-{3,}\s*$")
_ANY_HEADING_RE = re.compile(r"^\s*#{1,6}(?:\s|$)")
_ELEMENT_RE = re.compile(r"<([A-Za-z][\w-]*)\b([^>]*)>")
_BOLD_RE = re.compile(r"\*\*(.*?)\*\*")
_ITALIC_RE = re.compile(r"\*(.*?)\*")


@dataclass(frozen=True)
class Vocabulary:
    """Markers recognised by the scanner."""

    heading_keywords: tuple[str, ...] = ("Question", "Pregunta")
    answer_attribute: str = "message"
    additional_attribute: str = "inquire"

    def __post_init__(self) -> None:
        keywords = tuple(k.strip() for k in self.heading_keywords if k.strip())
        if not keywords:
            raise ValueError("At least one heading keyword is required.")
        object.__setattr__(self, "heading_keywords", keywords)

    @cached_property
    def heading_pattern(self) -> "re.Pattern[str]":
        alternatives = "|".join(re.escape(k) for k in self.heading_keywords)
        return re.compile(
            rf"^##\s+({alternatives})\s+(\d+)\s*$", re.IGNORECASE
        )

    @cached_property
    def answer_pattern(self) -> "re.Pattern[str]":
        return _attribute_pattern(self.answer_attribute)

    @cached_property
    def additional_pattern(self) -> "re.Pattern[str]":
        return _attribute_pattern(self.additional_attribute)


DEFAULT_VOCABULARY = Vocabulary()


def _attribute_pattern(name: str) -> "re.Pattern[str]":
    return re.compile(rf"(?:^|\s){re.escape(name)}\s*=\s*\"([^\"]*)\"")


class LineKind(Enum):
    BLANK = "blank"
    HEADING = "heading"
    OTHER_HEADING = "other_heading"
    RULE = "rule"
    CONTROL = "control"
    OPTION = "option"
    TEXT = "text"


class ScanState(Enum):
    SEEKING_HEADING = "seeking_heading"
    READING_BODY = "reading_body"
    READING_OPTIONS = "reading_options"
    READING_CONTROL = "reading_control"


@dataclass(frozen=True)
class ControlMarker:
    """An inline element carrying correct-answer letters."""

    tag: str
    answer: str
    additional: str | None = None


@dataclass(frozen=True)
class QuestionBlock:
    """Contiguous source span for one question."""

    index: int
    keyword: str
    number: str
    start_line: int
    lines: tuple[str, ...]
    final_state: ScanState = ScanState.READING_BODY

    @property
    def raw(self) -> str:
        heading = f"## {self.keyword} {self.number}"
        return "\n".join((heading, *self.lines))


@dataclass(frozen=True)
class BodySplit:
    """Result of locating the body/options boundary of a block."""

    text: str
    boundary: int
    reason: str


@dataclass(frozen=True)
class StructureCounts:
    headings: int
    control_markers: int
    options: int


def match_heading(
    line: str, vocabulary: Vocabulary = DEFAULT_VOCABULARY
) -> tuple[str, str] | None:
    """Return ``(keyword, number)`` when ``line`` is a question heading."""

    match = vocabulary.heading_pattern.match(line)
    if not match:
        return None
    return match.group(1), match.group(2)


def match_option(
    line: str, vocabulary: Vocabulary = DEFAULT_VOCABULARY
) -> tuple[str, str] | None:
    """Return ``(letter, cleaned_text)`` for an option-shaped line.

    A control marker written on the option line is not part of the text.
    """

    match = _OPTION_RE.match(line)
    if not match:
        return None
    text = _strip_control_markers(match.group(2), vocabulary)
    return match.group(1), strip_emphasis(text)


def _strip_control_markers(text: str, vocabulary: Vocabulary) -> str:
    removed: set[str] = set()

    def drop(element: "re.Match[str]") -> str:
        if vocabulary.answer_pattern.search(" " + element.group(2)):
            removed.add(element.group(1))
            return ""
        return element.group(0)

    text = _ELEMENT_RE.sub(drop, text)
    for tag in removed:
        text = re.sub(rf"</{re.escape(tag)}\s*>", "", text)
    return text


def strip_emphasis(text: str) -> str:
    """Remove ``**bold**`` and ``*italic*`` markup and trim."""

    text = _BOLD_RE.sub(r"\1", text)
    text = _ITALIC_RE.sub(r"\1", text)
    return text.strip()


def find_control_markers(
    line: str, vocabulary: Vocabulary = DEFAULT_VOCABULARY
) -> list[ControlMarker]:
    """Return every element on ``line`` that carries the answer attribute."""

    markers: list[ControlMarker] = []
    for element in _ELEMENT_RE.finditer(line):
        attributes = " " + element.group(2)
        answer = vocabulary.answer_pattern.search(attributes)
        if not answer:
            continue
        additional = vocabulary.additional_pattern.search(attributes)
        markers.append(
            ControlMarker(
                tag=element.group(1),
                answer=answer.group(1),
                additional=additional.group(1) if additional else None,
            )
        )
    return markers


def classify_line(
    line: str, vocabulary: Vocabulary = DEFAULT_VOCABULARY
) -> LineKind:
    if not line.strip():
        return LineKind.BLANK
    if match_heading(line, vocabulary):
        return LineKind.HEADING
    if _ANY_HEADING_RE.match(line):
        return LineKind.OTHER_HEADING
    if _RULE_RE.match(line):
        return LineKind.RULE
    if find_control_markers(line, vocabulary):
        return LineKind.CONTROL
    if match_option(line, vocabulary):
        return LineKind.OPTION
    return LineKind.TEXT


def _next_state(state: ScanState, kind: LineKind) -> ScanState:
    if kind is LineKind.HEADING:
        return ScanState.READING_BODY
    if kind in (LineKind.OTHER_HEADING, LineKind.RULE):
        return ScanState.SEEKING_HEADING
    if state is ScanState.SEEKING_HEADING:
        return state
    if kind is LineKind.CONTROL:
        return ScanState.READING_CONTROL
    if kind is LineKind.OPTION and state is ScanState.READING_BODY:
        return ScanState.READING_OPTIONS
    return state


def scan_blocks(
    text: str, vocabulary: Vocabulary = DEFAULT_VOCABULARY
) -> tuple[QuestionBlock, ...]:
    """Partition ``text`` into question blocks in document order."""

    blocks: list[QuestionBlock] = []
    state = ScanState.SEEKING_HEADING
    heading: tuple[str, str] | None = None
    start = 0
    current: list[str] = []

    def close() -> None:
        if heading is None:
            return
        blocks.append(
            QuestionBlock(
                index=len(blocks) + 1,
                keyword=heading[0],
                number=heading[1],
                start_line=start,
                lines=tuple(current),
                final_state=state,
            )
        )

    for lineno, line in enumerate(text.splitlines(), start=1):
        kind = classify_line(line, vocabulary)
        if kind in (LineKind.HEADING, LineKind.OTHER_HEADING, LineKind.RULE):
            if state is not ScanState.SEEKING_HEADING:
                close()
            heading = None
            current = []
            if kind is LineKind.HEADING:
                heading = match_heading(line, vocabulary)
                start = lineno
        elif state is not ScanState.SEEKING_HEADING:
            current.append(line)
        state = _next_state(state, kind)

    if state is not ScanState.SEEKING_HEADING:
        close()
    return tuple(blocks)


def split_body(
    lines: Sequence[str], vocabulary: Vocabulary = DEFAULT_VOCABULARY
) -> BodySplit:
    """Locate the end of the question body.

    The body is every line after the heading up to, but excluding, the first
    option-shaped line or the first line holding a control marker, whichever
    comes first. ``boundary`` is the index of that line in ``lines`` (or
    ``len(lines)`` when neither occurs) and ``reason`` is ``"option"``,
    ``"control"`` or ``"end"``.
    """

    for idx, line in enumerate(lines):
        kind = classify_line(line, vocabulary)
        if kind is LineKind.CONTROL:
            return BodySplit(_join(lines[:idx]), idx, "control")
        if kind is LineKind.OPTION:
            return BodySplit(_join(lines[:idx]), idx, "option")
    return BodySplit(_join(lines), len(lines), "end")


def count_structure(
    text: str, vocabulary: Vocabulary = DEFAULT_VOCABULARY
) -> StructureCounts:
    """Count headings, control markers and option lines in ``text``."""

    headings = markers = options = 0
    for line in text.splitlines():
        if match_heading(line, vocabulary):
            headings += 1
            continue
        markers += len(find_control_markers(line, vocabulary))
        if match_option(line, vocabulary):
            options += 1
    return StructureCounts(headings, markers, options)


def _join(lines: Iterable[str]) -> str:
    return "\n".join(lines).strip()
