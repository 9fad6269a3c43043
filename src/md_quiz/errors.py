"""Typed failures raised by the parsing pipeline and the session engine."""

from __future__ import annotations

from typing import Sequence

__all__ = [
    "QuizError",
    "DocumentFormatError",
    "DocumentLoadError",
    "EmptyPoolError",
    "InvalidStateError",
    "MalformedAnswerError",
    "UnknownOptionError",
]


class QuizError(Exception):
    """Base class for every md_quiz failure surfaced to callers."""


class DocumentFormatError(QuizError):
    """Raised when a document has no recognisable question structure at all.

    ``missing`` names the structural parts that were not detected
    (``"heading"``, ``"control_marker"``, ``"option"``). No partial pool is
    produced when this is raised.
    """

    def __init__(self, message: str, *, missing: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.missing = tuple(missing)


class DocumentLoadError(QuizError):
    """Raised when a document cannot be read from disk."""


class EmptyPoolError(QuizError):
    """Raised when a session is requested against an empty pool."""


class InvalidStateError(QuizError):
    """Raised when a session operation is invoked in the wrong phase."""

    def __init__(self, message: str, *, phase: str, operation: str) -> None:
        super().__init__(message)
        self.phase = phase
        self.operation = operation


class MalformedAnswerError(QuizError):
    """Raised when a submitted answer breaks the letter format rules."""

    def __init__(self, message: str, *, answer: object) -> None:
        super().__init__(message)
        self.answer = answer


class UnknownOptionError(QuizError):
    """Raised when a submitted letter is not an option of the question."""

    def __init__(
        self, message: str, *, letter: str, available: Sequence[str]
    ) -> None:
        super().__init__(message)
        self.letter = letter
        self.available = tuple(available)
