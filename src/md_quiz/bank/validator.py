"""Structural rules for candidate questions and whole documents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..errors import DocumentFormatError
from .extractor import CandidateQuestion
from .models import QuestionRecord
from .report import QualityWarning, RuleViolation, ValidationRule, WarningKind
from .scanner import DEFAULT_VOCABULARY, Vocabulary, count_structure

__all__ = [
    "DEFAULT_RULES",
    "ValidationRules",
    "build_record",
    "check_document",
    "quality_warnings",
    "validate_candidate",
]

_MAX_BLANK_RUN = 3


@dataclass(frozen=True)
class ValidationRules:
    """Limits applied to every extracted question."""

    min_content_length: int = 10
    max_content_length: int = 2000
    min_options: int = 2
    max_options: int = 8
    required_option_letters: tuple[str, ...] = ("A", "B")
    max_option_text_length: int = 500

    def __post_init__(self) -> None:
        if self.min_content_length > self.max_content_length:
            raise ValueError(
                "min_content_length must not exceed max_content_length."
            )
        if self.min_options > self.max_options:
            raise ValueError("min_options must not exceed max_options.")
        object.__setattr__(
            self,
            "required_option_letters",
            tuple(self.required_option_letters),
        )


DEFAULT_RULES = ValidationRules()


def validate_candidate(
    candidate: CandidateQuestion, rules: ValidationRules = DEFAULT_RULES
) -> tuple[RuleViolation, ...]:
    """Return every rule ``candidate`` breaks; empty when it is acceptable."""

    violations: list[RuleViolation] = []
    violations.extend(_check_content(candidate.content, rules))
    violations.extend(_check_options(candidate.option_map, rules))
    violations.extend(_check_answers(candidate))
    return tuple(violations)


def _check_content(
    content: str, rules: ValidationRules
) -> list[RuleViolation]:
    length = len(content)
    if length < rules.min_content_length:
        return [
            RuleViolation(
                ValidationRule.CONTENT_TOO_SHORT,
                length,
                f"Content too short ({length} characters, minimum "
                f"{rules.min_content_length}).",
            )
        ]
    if length > rules.max_content_length:
        return [
            RuleViolation(
                ValidationRule.CONTENT_TOO_LONG,
                length,
                f"Content too long ({length} characters, maximum "
                f"{rules.max_content_length}).",
            )
        ]
    return []


def _check_options(
    options: dict[str, str], rules: ValidationRules
) -> list[RuleViolation]:
    out: list[RuleViolation] = []
    count = len(options)
    if count < rules.min_options:
        out.append(
            RuleViolation(
                ValidationRule.TOO_FEW_OPTIONS,
                count,
                f"Too few options ({count}, minimum {rules.min_options}).",
            )
        )
    elif count > rules.max_options:
        out.append(
            RuleViolation(
                ValidationRule.TOO_MANY_OPTIONS,
                count,
                f"Too many options ({count}, maximum {rules.max_options}).",
            )
        )
    for letter in rules.required_option_letters:
        if letter not in options:
            out.append(
                RuleViolation(
                    ValidationRule.MISSING_REQUIRED_OPTION,
                    letter,
                    f"Required option {letter} is missing.",
                )
            )
    for letter, text in options.items():
        if not text.strip():
            out.append(
                RuleViolation(
                    ValidationRule.EMPTY_OPTION_TEXT,
                    letter,
                    f"Option {letter} has no text.",
                )
            )
        elif len(text) > rules.max_option_text_length:
            out.append(
                RuleViolation(
                    ValidationRule.OPTION_TEXT_TOO_LONG,
                    letter,
                    f"Option {letter} too long ({len(text)} characters, "
                    f"maximum {rules.max_option_text_length}).",
                )
            )
    return out


def _check_answers(candidate: CandidateQuestion) -> list[RuleViolation]:
    if candidate.control_markers == 0:
        return [
            RuleViolation(
                ValidationRule.MISSING_CONTROL_MARKER,
                None,
                "No control marker with correct answers found.",
            )
        ]
    if not candidate.correct_answers:
        return [
            RuleViolation(
                ValidationRule.NO_CORRECT_ANSWERS,
                "",
                "Control marker does not name any correct answer.",
            )
        ]
    options = candidate.option_map
    return [
        RuleViolation(
            ValidationRule.UNKNOWN_CORRECT_ANSWER,
            letter,
            f"Correct answer {letter} is not among the options.",
        )
        for letter in candidate.correct_answers
        if letter not in options
    ]


def build_record(candidate: CandidateQuestion) -> QuestionRecord:
    """Freeze an accepted candidate into a :class:`QuestionRecord`."""

    return QuestionRecord(
        id=candidate.id,
        title=candidate.title,
        content=candidate.content,
        options=candidate.option_map,
        correct_answers=candidate.correct_answers,
        number=int(candidate.number),
        source_line=candidate.start_line,
    )


def check_document(
    text: str, vocabulary: Vocabulary = DEFAULT_VOCABULARY
) -> None:
    """Raise :class:`DocumentFormatError` unless ``text`` looks like a bank."""

    if not isinstance(text, str) or not text.strip():
        raise DocumentFormatError(
            "Document is empty.",
            missing=("heading", "control_marker", "option"),
        )
    counts = count_structure(text, vocabulary)
    missing = [
        name
        for name, count in (
            ("heading", counts.headings),
            ("control_marker", counts.control_markers),
            ("option", counts.options),
        )
        if count == 0
    ]
    if missing:
        raise DocumentFormatError(
            "Document is missing required structure: "
            + ", ".join(missing)
            + ".",
            missing=missing,
        )


def quality_warnings(
    text: str,
    candidates: Sequence[CandidateQuestion],
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> tuple[QualityWarning, ...]:
    warnings: list[QualityWarning] = []
    warnings.extend(_numbering_warnings(candidates))
    for candidate in candidates:
        if candidate.control_markers > 1:
            warnings.append(
                QualityWarning(
                    WarningKind.MULTIPLE_CONTROL_MARKERS,
                    f"Question {candidate.number} has "
                    f"{candidate.control_markers} control markers; only the "
                    "first is used.",
                    candidate.number,
                )
            )
    if _longest_blank_run(text) > _MAX_BLANK_RUN:
        warnings.append(
            QualityWarning(
                WarningKind.EXCESSIVE_BLANK_LINES,
                f"More than {_MAX_BLANK_RUN} consecutive blank lines found.",
            )
        )
    counts = count_structure(text, vocabulary)
    if counts.headings > counts.control_markers:
        warnings.append(
            QualityWarning(
                WarningKind.HEADING_MARKER_MISMATCH,
                f"Found {counts.headings} question headings but only "
                f"{counts.control_markers} control markers.",
            )
        )
    return tuple(warnings)


def _numbering_warnings(
    candidates: Sequence[CandidateQuestion],
) -> list[QualityWarning]:
    out: list[QualityWarning] = []
    seen: set[int] = set()
    previous: int | None = None
    for candidate in candidates:
        number = int(candidate.number)
        if number in seen:
            out.append(
                QualityWarning(
                    WarningKind.DUPLICATE_NUMBER,
                    f"Duplicate question number: {candidate.number}.",
                    candidate.number,
                )
            )
        elif previous is not None and number != previous + 1:
            out.append(
                QualityWarning(
                    WarningKind.NON_SEQUENTIAL_NUMBER,
                    f"Question numbering jumps from {previous} to {number}.",
                    candidate.number,
                )
            )
        seen.add(number)
        previous = number
    return out


def _longest_blank_run(text: str) -> int:
    longest = run = 0
    for line in text.splitlines():
        if line.strip():
            run = 0
            continue
        run += 1
        longest = max(longest, run)
    return longest
