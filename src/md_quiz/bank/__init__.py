"""Question bank extraction and validation."""

from __future__ import annotations

from .extractor import CandidateQuestion, extract_candidate
from .loader import load_document
from .models import QuestionRecord
from .pipeline import ParseResult, parse
from .report import (
    ParseReport,
    QualityWarning,
    QuestionRejection,
    RuleViolation,
    ValidationRule,
    WarningKind,
)
from .scanner import (
    DEFAULT_VOCABULARY,
    QuestionBlock,
    Vocabulary,
    scan_blocks,
    split_body,
)
from .validator import DEFAULT_RULES, ValidationRules

__all__ = [
    "CandidateQuestion",
    "extract_candidate",
    "load_document",
    "QuestionRecord",
    "ParseResult",
    "parse",
    "ParseReport",
    "QualityWarning",
    "QuestionRejection",
    "RuleViolation",
    "ValidationRule",
    "WarningKind",
    "DEFAULT_VOCABULARY",
    "QuestionBlock",
    "Vocabulary",
    "scan_blocks",
    "split_body",
    "DEFAULT_RULES",
    "ValidationRules",
]
