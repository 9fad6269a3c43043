"""Quiz session state machine over a validated question pool."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Iterable, Optional, Protocol, Sequence, Union

from ..bank.models import QuestionRecord
from ..errors import (
    EmptyPoolError,
    InvalidStateError,
    MalformedAnswerError,
    UnknownOptionError,
)
from .results import ResultsReport, build_results, compute_score

__all__ = [
    "MAX_ANSWER_LENGTH",
    "AnswerOutcome",
    "Progress",
    "QuestionView",
    "QuizSession",
    "RandomSource",
    "SessionPhase",
    "SessionStats",
    "create_session",
]

MAX_ANSWER_LENGTH = 10

_LOGGER = logging.getLogger(__name__)

Clock = Callable[[], datetime]
AnswerInput = Union[str, Iterable[str]]


class RandomSource(Protocol):
    def randrange(self, stop: int) -> int:
        ...


class SessionPhase(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class QuestionView:
    question: QuestionRecord
    index: int
    total: int
    is_last: bool

    @property
    def position(self) -> int:
        return self.index + 1


@dataclass(frozen=True)
class AnswerOutcome:
    is_correct: bool
    question_index: int
    question_id: str
    selected: frozenset[str]


@dataclass(frozen=True)
class Progress:
    current: int
    total: int
    percentage: int


@dataclass(frozen=True)
class SessionStats:
    answered: int
    remaining: int
    correct_so_far: int
    accuracy: int


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _draw(
    pool: Sequence[QuestionRecord], count: int, rng: RandomSource
) -> tuple[QuestionRecord, ...]:
    remaining = list(pool)
    chosen: list[QuestionRecord] = []
    while len(chosen) < count:
        chosen.append(remaining.pop(rng.randrange(len(remaining))))
    return tuple(chosen)


def _clamp(requested: int, available: int) -> int:
    return max(1, min(int(requested), available))


class QuizSession:
    """Drive one quiz attempt over a random subset of the pool.

    The subset is fixed when the session is created (or redrawn by
    :meth:`start_new_quiz`). Answers are stored per position and scored
    by exact set equality against the question's correct answers.
    """

    def __init__(
        self,
        pool: Sequence[QuestionRecord],
        requested_count: int,
        *,
        rng: Optional[RandomSource] = None,
        clock: Optional[Clock] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._pool: tuple[QuestionRecord, ...] = tuple(pool)
        if not self._pool:
            raise EmptyPoolError("Cannot start a quiz from an empty pool.")
        self._rng: RandomSource = rng if rng is not None else random.Random()
        self._clock: Clock = clock or _utc_now
        self._log = logger or _LOGGER
        self.requested_count = _clamp(requested_count, len(self._pool))
        self.selected: tuple[QuestionRecord, ...] = ()
        self._answers: list[Optional[frozenset[str]]] = []
        self.current_index = 0
        self.started_at: Optional[datetime] = None
        self.completed_at: Optional[datetime] = None
        self.phase = SessionPhase.NOT_STARTED
        self._select()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def _select(self) -> None:
        self.selected = _draw(self._pool, self.requested_count, self._rng)
        self._reset()
        self._log.info(
            "Selected quiz questions",
            extra={
                "requested_count": self.requested_count,
                "pool_size": len(self._pool),
                "question_ids": [q.id for q in self.selected],
            },
        )

    def _reset(self) -> None:
        self._answers = [None] * len(self.selected)
        self.current_index = 0
        self.started_at = None
        self.completed_at = None
        self.phase = SessionPhase.NOT_STARTED

    def restart(self) -> None:
        """Clear answers and timestamps but keep the same questions."""

        self._reset()
        self._log.info(
            "Restarted quiz", extra={"total": len(self.selected)}
        )

    def start_new_quiz(self, count: Optional[int] = None) -> None:
        """Draw a fresh subset, optionally with a new requested count."""

        if count is not None:
            self.requested_count = _clamp(count, len(self._pool))
        self._select()

    # ------------------------------------------------------------------
    # Questions and answers
    # ------------------------------------------------------------------
    @property
    def answers(self) -> tuple[Optional[frozenset[str]], ...]:
        return tuple(self._answers)

    @property
    def total(self) -> int:
        return len(self.selected)

    @property
    def is_started(self) -> bool:
        return self.started_at is not None

    @property
    def is_completed(self) -> bool:
        return self.phase is SessionPhase.COMPLETED

    @property
    def questions_remaining(self) -> int:
        if self.is_completed:
            return 0
        return self.total - self.current_index - 1

    def current_question(self) -> QuestionView:
        self._require_not_completed("current_question")
        return self._view()

    def _view(self) -> QuestionView:
        return QuestionView(
            question=self.selected[self.current_index],
            index=self.current_index,
            total=self.total,
            is_last=self.current_index == self.total - 1,
        )

    def submit_answer(self, letters: AnswerInput) -> AnswerOutcome:
        """Record ``letters`` for the current question and score them.

        ``letters`` may be a string such as ``"CB"`` or an iterable of
        single letters. Submitting again overwrites the stored answer.
        """

        self._require_not_completed("submit_answer")
        selection = _normalise_answer(letters)
        question = self.selected[self.current_index]
        available = question.option_letters
        for letter in sorted(selection):
            if letter not in question.options:
                raise UnknownOptionError(
                    f"Option {letter} is not available; choose from "
                    f"{', '.join(available)}.",
                    letter=letter,
                    available=available,
                )

        if self.phase is SessionPhase.NOT_STARTED:
            self.started_at = self._clock()
            self.phase = SessionPhase.IN_PROGRESS
        self._answers[self.current_index] = selection
        outcome = AnswerOutcome(
            is_correct=question.is_correct(selection),
            question_index=self.current_index,
            question_id=question.id,
            selected=selection,
        )
        self._log.debug(
            "Answer submitted",
            extra={
                "question_id": question.id,
                "question_index": self.current_index,
                "selected": "".join(question.ordered(selection)),
                "is_correct": outcome.is_correct,
            },
        )
        return outcome

    def advance(self) -> Optional[QuestionView]:
        """Move to the next question; return ``None`` once the quiz ends."""

        if self.phase is not SessionPhase.IN_PROGRESS:
            raise InvalidStateError(
                f"Cannot advance while the quiz is {self.phase.value}.",
                phase=self.phase.value,
                operation="advance",
            )
        if self.current_index < self.total - 1:
            self.current_index += 1
            return self._view()

        self.completed_at = self._clock()
        self.phase = SessionPhase.COMPLETED
        self._log.info(
            "Quiz completed",
            extra={
                "total": self.total,
                "answered": sum(1 for a in self._answers if a is not None),
            },
        )
        return None

    def results(self) -> ResultsReport:
        if not self.is_completed:
            raise InvalidStateError(
                "Results are only available once the quiz is completed.",
                phase=self.phase.value,
                operation="results",
            )
        return build_results(
            self.selected,
            self._answers,
            started_at=self.started_at,
            completed_at=self.completed_at,
        )

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def progress(self) -> Progress:
        current = min(self.current_index + 1, self.total)
        return Progress(
            current=current,
            total=self.total,
            percentage=compute_score(current, self.total),
        )

    def stats(self) -> SessionStats:
        answered = 0
        correct = 0
        for question, answer in zip(self.selected, self._answers):
            if answer is None:
                continue
            answered += 1
            if question.is_correct(answer):
                correct += 1
        return SessionStats(
            answered=answered,
            remaining=self.total - answered,
            correct_so_far=correct,
            accuracy=compute_score(correct, answered),
        )

    def _require_not_completed(self, operation: str) -> None:
        if self.is_completed:
            raise InvalidStateError(
                f"The quiz is completed; {operation} is no longer allowed.",
                phase=self.phase.value,
                operation=operation,
            )


def _normalise_answer(letters: AnswerInput) -> frozenset[str]:
    if isinstance(letters, str):
        raw = letters
    else:
        try:
            parts = list(letters)
        except TypeError:
            raise MalformedAnswerError(
                "Answer must be a string or an iterable of letters.",
                answer=letters,
            ) from None
        if not all(isinstance(part, str) for part in parts):
            raise MalformedAnswerError(
                "Answer letters must be strings.", answer=letters
            )
        raw = "".join(parts)

    if not raw:
        raise MalformedAnswerError("Answer is empty.", answer=letters)
    if len(raw) > MAX_ANSWER_LENGTH:
        raise MalformedAnswerError(
            f"Answer is longer than {MAX_ANSWER_LENGTH} characters.",
            answer=letters,
        )
    invalid = [ch for ch in raw if not ("A" <= ch <= "Z")]
    if invalid:
        raise MalformedAnswerError(
            "Answer may only contain uppercase letters A-Z.",
            answer=letters,
        )
    return frozenset(raw)


def create_session(
    pool: Sequence[QuestionRecord],
    requested_count: int,
    *,
    rng: Optional[RandomSource] = None,
    clock: Optional[Clock] = None,
    logger: Optional[logging.Logger] = None,
) -> QuizSession:
    """Build a :class:`QuizSession` drawing ``requested_count`` questions.

    The count is clamped to ``[1, len(pool)]``; an empty pool raises
    :class:`~md_quiz.errors.EmptyPoolError`.
    """

    return QuizSession(
        pool, requested_count, rng=rng, clock=clock, logger=logger
    )
