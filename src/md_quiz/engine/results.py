"""Scoring and the final results report for a completed session."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence

from ..bank.models import QuestionRecord

__all__ = [
    "QuestionResult",
    "ResultsReport",
    "build_results",
    "compute_score",
]


@dataclass(frozen=True)
class QuestionResult:
    """How one selected question was answered."""

    position: int
    question: QuestionRecord
    chosen: Optional[tuple[str, ...]]
    chosen_texts: tuple[str, ...]
    correct: tuple[str, ...]
    correct_texts: tuple[str, ...]
    is_correct: bool

    @property
    def answered(self) -> bool:
        return self.chosen is not None


@dataclass(frozen=True)
class ResultsReport:
    details: tuple[QuestionResult, ...]
    score: int
    correct_count: int
    total_questions: int
    duration_seconds: int
    started_at: Optional[datetime]
    completed_at: Optional[datetime]

    @property
    def answered_count(self) -> int:
        return sum(1 for detail in self.details if detail.answered)

    def as_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "correct_count": self.correct_count,
            "total_questions": self.total_questions,
            "duration_seconds": self.duration_seconds,
            "started_at": _iso(self.started_at),
            "completed_at": _iso(self.completed_at),
            "details": [
                {
                    "position": d.position,
                    "question_id": d.question.id,
                    "chosen": list(d.chosen) if d.chosen is not None else None,
                    "chosen_texts": list(d.chosen_texts),
                    "correct": list(d.correct),
                    "correct_texts": list(d.correct_texts),
                    "is_correct": d.is_correct,
                }
                for d in self.details
            ],
        }


def compute_score(correct_count: int, total_questions: int) -> int:
    """Percentage of correct answers, rounded half up."""

    if total_questions <= 0:
        return 0
    return int(math.floor(100 * correct_count / total_questions + 0.5))


def build_results(
    questions: Sequence[QuestionRecord],
    answers: Sequence[Optional[frozenset[str]]],
    *,
    started_at: Optional[datetime],
    completed_at: Optional[datetime],
) -> ResultsReport:
    details: list[QuestionResult] = []
    for position, (question, answer) in enumerate(
        zip(questions, answers), start=1
    ):
        chosen = question.ordered(answer) if answer is not None else None
        details.append(
            QuestionResult(
                position=position,
                question=question,
                chosen=chosen,
                chosen_texts=tuple(
                    question.options[letter] for letter in chosen or ()
                ),
                correct=question.correct_answers,
                correct_texts=tuple(
                    question.options[letter]
                    for letter in question.correct_answers
                ),
                is_correct=answer is not None and question.is_correct(answer),
            )
        )
    correct_count = sum(1 for detail in details if detail.is_correct)
    total = len(details)
    return ResultsReport(
        details=tuple(details),
        score=compute_score(correct_count, total),
        correct_count=correct_count,
        total_questions=total,
        duration_seconds=_duration(started_at, completed_at),
        started_at=started_at,
        completed_at=completed_at,
    )


def _duration(
    started_at: Optional[datetime], completed_at: Optional[datetime]
) -> int:
    if started_at is None or completed_at is None:
        return 0
    seconds = (completed_at - started_at).total_seconds()
    return max(0, int(math.floor(seconds + 0.5)))


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None
