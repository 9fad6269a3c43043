"""Quiz session engine and scoring."""

from __future__ import annotations

from .results import QuestionResult, ResultsReport, compute_score
from .session import (
    AnswerOutcome,
    Progress,
    QuestionView,
    QuizSession,
    RandomSource,
    SessionPhase,
    SessionStats,
    create_session,
)

__all__ = [
    "QuestionResult",
    "ResultsReport",
    "compute_score",
    "AnswerOutcome",
    "Progress",
    "QuestionView",
    "QuizSession",
    "RandomSource",
    "SessionPhase",
    "SessionStats",
    "create_session",
]
