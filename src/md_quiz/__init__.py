"""Markdown multiple-choice question banks and quiz sessions."""

from __future__ import annotations

from .bank import ParseReport, ParseResult, QuestionRecord, load_document, parse
from .engine import QuizSession, ResultsReport, SessionPhase, create_session
from .errors import (
    DocumentFormatError,
    DocumentLoadError,
    EmptyPoolError,
    InvalidStateError,
    MalformedAnswerError,
    QuizError,
    UnknownOptionError,
)

__all__ = [
    "ParseReport",
    "ParseResult",
    "QuestionRecord",
    "load_document",
    "parse",
    "QuizSession",
    "ResultsReport",
    "SessionPhase",
    "create_session",
    "DocumentFormatError",
    "DocumentLoadError",
    "EmptyPoolError",
    "InvalidStateError",
    "MalformedAnswerError",
    "QuizError",
    "UnknownOptionError",
]
