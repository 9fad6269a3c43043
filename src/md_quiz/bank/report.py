"""Diagnostic report values returned alongside a parsed pool."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

__all__ = [
    "ParseReport",
    "QualityWarning",
    "QuestionRejection",
    "RuleViolation",
    "ValidationRule",
    "WarningKind",
]


class ValidationRule(Enum):
    """Per-question rules; breaking any of them drops the question."""

    CONTENT_TOO_SHORT = "content_too_short"
    CONTENT_TOO_LONG = "content_too_long"
    TOO_FEW_OPTIONS = "too_few_options"
    TOO_MANY_OPTIONS = "too_many_options"
    MISSING_REQUIRED_OPTION = "missing_required_option"
    EMPTY_OPTION_TEXT = "empty_option_text"
    OPTION_TEXT_TOO_LONG = "option_text_too_long"
    MISSING_CONTROL_MARKER = "missing_control_marker"
    NO_CORRECT_ANSWERS = "no_correct_answers"
    UNKNOWN_CORRECT_ANSWER = "unknown_correct_answer"


class WarningKind(Enum):
    """Document quality issues that never cause a rejection."""

    DUPLICATE_NUMBER = "duplicate_number"
    NON_SEQUENTIAL_NUMBER = "non_sequential_number"
    MULTIPLE_CONTROL_MARKERS = "multiple_control_markers"
    EXCESSIVE_BLANK_LINES = "excessive_blank_lines"
    HEADING_MARKER_MISMATCH = "heading_marker_mismatch"


@dataclass(frozen=True)
class RuleViolation:
    rule: ValidationRule
    value: Any
    message: str


@dataclass(frozen=True)
class QuestionRejection:
    """A dropped block and every rule it broke."""

    block_index: int
    number: str | None
    violations: tuple[RuleViolation, ...]
    start_line: int = 0

    @property
    def rule(self) -> ValidationRule:
        return self.violations[0].rule

    @property
    def value(self) -> Any:
        return self.violations[0].value

    @property
    def message(self) -> str:
        return "; ".join(v.message for v in self.violations)


@dataclass(frozen=True)
class QualityWarning:
    kind: WarningKind
    message: str
    number: str | None = None


@dataclass(frozen=True)
class ParseReport:
    """Outcome counters and diagnostics for one ``parse`` call."""

    detected_blocks: int
    rejections: tuple[QuestionRejection, ...] = ()
    warnings: tuple[QualityWarning, ...] = ()
    accepted_ids: tuple[str, ...] = field(default=())

    @property
    def accepted_count(self) -> int:
        return self.detected_blocks - len(self.rejections)

    @property
    def rejected_count(self) -> int:
        return len(self.rejections)

    @property
    def success_rate(self) -> float:
        if self.detected_blocks == 0:
            return 0.0
        return self.accepted_count / self.detected_blocks

    def as_dict(self) -> dict[str, Any]:
        return {
            "detected_blocks": self.detected_blocks,
            "accepted_count": self.accepted_count,
            "rejected_count": self.rejected_count,
            "success_rate": round(self.success_rate, 3),
            "rejections": [
                {
                    "block_index": rejection.block_index,
                    "number": rejection.number,
                    "start_line": rejection.start_line,
                    "violations": [
                        {
                            "rule": violation.rule.value,
                            "value": _jsonable(violation.value),
                            "message": violation.message,
                        }
                        for violation in rejection.violations
                    ],
                }
                for rejection in self.rejections
            ],
            "warnings": [
                {
                    "kind": warning.kind.value,
                    "message": warning.message,
                    "number": warning.number,
                }
                for warning in self.warnings
            ],
        }


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(item) for item in value]
    return repr(value)
