"""Field extraction for scanned question blocks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from .models import pad_question_id
from .scanner import (
    DEFAULT_VOCABULARY,
    ControlMarker,
    QuestionBlock,
    Vocabulary,
    find_control_markers,
    match_option,
    split_body,
)

__all__ = [
    "CandidateQuestion",
    "extract_answers",
    "extract_candidate",
    "extract_options",
]


@dataclass(frozen=True)
class CandidateQuestion:
    """Fields pulled from one block before validation."""

    block_index: int
    number: str
    keyword: str
    content: str
    options: tuple[tuple[str, str], ...]
    correct_answers: tuple[str, ...]
    control_markers: int
    start_line: int = 0

    @property
    def id(self) -> str:
        return pad_question_id(self.number)

    @property
    def title(self) -> str:
        return f"{self.keyword} {self.number}"

    @property
    def option_map(self) -> dict[str, str]:
        return dict(self.options)


def extract_candidate(
    block: QuestionBlock, vocabulary: Vocabulary = DEFAULT_VOCABULARY
) -> CandidateQuestion:
    body = split_body(block.lines, vocabulary)
    remainder = block.lines[body.boundary:]
    markers = [
        marker
        for line in remainder
        for marker in find_control_markers(line, vocabulary)
    ]
    return CandidateQuestion(
        block_index=block.index,
        number=block.number,
        keyword=block.keyword,
        content=body.text,
        options=extract_options(remainder, vocabulary),
        correct_answers=extract_answers(markers),
        control_markers=len(markers),
        start_line=block.start_line,
    )


def extract_options(
    lines: Iterable[str], vocabulary: Vocabulary = DEFAULT_VOCABULARY
) -> tuple[tuple[str, str], ...]:
    """Collect ``(letter, text)`` pairs; the first occurrence of a letter wins."""

    seen: dict[str, str] = {}
    for line in lines:
        matched = match_option(line, vocabulary)
        if matched is None:
            continue
        letter, text = matched
        seen.setdefault(letter, text)
    return tuple(seen.items())


def extract_answers(markers: Sequence[ControlMarker]) -> tuple[str, ...]:
    """Return correct letters from the first marker plus additional letters.

    Letters come from the first marker's answer attribute, then from its
    additional attribute, or, when it has none, from the first later marker
    that carries one. Characters outside A-Z are ignored and duplicates
    dropped.
    """

    if not markers:
        return ()
    primary = markers[0]
    additional = primary.additional
    if additional is None:
        additional = next(
            (m.additional for m in markers[1:] if m.additional is not None),
            None,
        )
    letters: list[str] = []
    for char in primary.answer + (additional or ""):
        if "A" <= char <= "Z" and char not in letters:
            letters.append(char)
    return tuple(letters)
