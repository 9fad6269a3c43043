"""Turn raw document text into a question pool plus a diagnostic report."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .extractor import extract_candidate
from .models import QuestionRecord
from .report import ParseReport, QuestionRejection
from .scanner import DEFAULT_VOCABULARY, Vocabulary, scan_blocks
from .validator import (
    DEFAULT_RULES,
    ValidationRules,
    build_record,
    check_document,
    quality_warnings,
    validate_candidate,
)

__all__ = ["ParseResult", "parse"]

_LOGGER = logging.getLogger(__name__)
_BOM = "\ufeff"


@dataclass(frozen=True)
class ParseResult:
    pool: tuple[QuestionRecord, ...]
    report: ParseReport


def parse(
    text: str,
    *,
    vocabulary: Optional[Vocabulary] = None,
    rules: Optional[ValidationRules] = None,
    logger: Optional[logging.Logger] = None,
) -> ParseResult:
    """Parse ``text`` into accepted questions in document order.

    Malformed blocks are dropped and described in the returned report; only
    a document with no recognisable structure at all raises
    :class:`~md_quiz.errors.DocumentFormatError`. The function keeps no state
    between calls. A leading byte-order mark is ignored.
    """

    vocabulary = vocabulary or DEFAULT_VOCABULARY
    rules = rules or DEFAULT_RULES
    log = logger or _LOGGER

    if isinstance(text, str) and text.startswith(_BOM):
        text = text[len(_BOM):]
    check_document(text, vocabulary)

    blocks = scan_blocks(text, vocabulary)
    candidates = [extract_candidate(block, vocabulary) for block in blocks]

    pool: list[QuestionRecord] = []
    rejections: list[QuestionRejection] = []
    for candidate in candidates:
        violations = validate_candidate(candidate, rules)
        if violations:
            rejection = QuestionRejection(
                block_index=candidate.block_index,
                number=candidate.number,
                violations=violations,
                start_line=candidate.start_line,
            )
            rejections.append(rejection)
            log.warning(
                "Rejected question block",
                extra={
                    "block_index": rejection.block_index,
                    "number": rejection.number,
                    "rule": rejection.rule.value,
                    "value": rejection.value,
                    "violations": [v.rule.value for v in violations],
                },
            )
            continue
        record = build_record(candidate)
        pool.append(record)
        log.debug(
            "Accepted question",
            extra={
                "question_id": record.id,
                "option_count": len(record.options),
                "correct_answers": "".join(record.correct_answers),
            },
        )

    report = ParseReport(
        detected_blocks=len(blocks),
        rejections=tuple(rejections),
        warnings=quality_warnings(text, candidates, vocabulary),
        accepted_ids=tuple(record.id for record in pool),
    )
    log.info(
        "Parsed question document",
        extra={
            "detected_blocks": report.detected_blocks,
            "accepted": report.accepted_count,
            "rejected": report.rejected_count,
            "warnings": len(report.warnings),
        },
    )
    return ParseResult(pool=tuple(pool), report=report)
