"""Immutable question records produced by the parsing pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class QuestionRecord:
    """One accepted multiple-choice question.

    ``options`` preserves the order in which letters first appeared in the
    source document and is exposed as a read-only mapping.
    """

    id: str
    title: str
    content: str
    options: Mapping[str, str] = field(hash=False)
    correct_answers: tuple[str, ...]
    number: int = 0
    source_line: int = field(default=0, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.options, MappingProxyType):
            object.__setattr__(
                self, "options", MappingProxyType(dict(self.options))
            )
        object.__setattr__(
            self, "correct_answers", tuple(self.correct_answers)
        )

    @property
    def option_letters(self) -> tuple[str, ...]:
        return tuple(self.options)

    @property
    def is_multi_select(self) -> bool:
        return len(self.correct_answers) > 1

    def option_text(self, letter: str) -> str | None:
        return self.options.get(letter)

    def is_correct(self, letters: frozenset[str] | set[str]) -> bool:
        """Exact set comparison against the correct answers."""

        return frozenset(letters) == frozenset(self.correct_answers)

    def ordered(self, letters: frozenset[str] | set[str]) -> tuple[str, ...]:
        """Return ``letters`` sorted by option order."""

        rank = {letter: idx for idx, letter in enumerate(self.options)}
        return tuple(sorted(letters, key=lambda ch: (rank.get(ch, 99), ch)))


def pad_question_id(number: str) -> str:
    """Zero-pad a question number to at least three digits."""

    return number.strip().zfill(3)
