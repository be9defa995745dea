"""Line-based heuristic extraction of Indian tax document fields.

Every pattern below is a label search over candidate lines: the first line (in
reading order) that matches a label wins, and the amount is read from the text
that follows the label (after its last ":", "=" or spaced "-" when there is
one) so that "Section 80C" style labels do not leak their own digits into the
value.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Pattern, Tuple

from extraction.amounts import parse_amount
from extraction.models import (
    LOW_QUALITY_MESSAGE,
    SOURCE_LINE,
    SOURCE_REGEX,
    DocumentType,
    ExtractedField,
    ExtractionResult,
    Quality,
    derive_summary,
)

logger = logging.getLogger(__name__)

PAN_RE = re.compile(r"[A-Z]{5}[0-9]{4}[A-Z]")
EMPLOYER_LINE_RE = re.compile(r"employer|company|deductor", re.IGNORECASE)
EMPLOYER_PREFIX_RE = re.compile(r"^.{0,30}?\b(employer|company|deductor)\b[^:\-]{0,30}?[:\-]\s*", re.IGNORECASE)
CANDIDATE_KEYWORD_RE = re.compile(r"salary|gross|taxable|tds|deduction|income", re.IGNORECASE)
# A dash only separates when spaced, so "-5,000" keeps its sign.
VALUE_SEPARATOR_RE = re.compile(r"[:=]|-(?=\s)")

MIN_READABLE_CHARS = 20
MIN_CRITICAL_SIGNALS = 2

FieldPattern = Tuple[str, Pattern[str], float]

_SALARY_PATTERNS: List[FieldPattern] = [
    ("Salary", re.compile(r"gross\s*salary|total\s*salary|income\s*from\s*salary", re.IGNORECASE), 0.9),
    ("Taxable Income", re.compile(r"taxable\s*income|total\s*taxable", re.IGNORECASE), 0.85),
    ("TDS", re.compile(r"\btds\b|tax\s+deducted", re.IGNORECASE), 0.8),
    ("Deductions", re.compile(r"deductions?|\b80c\b|\b80d\b|\b80tta\b|investments", re.IGNORECASE), 0.7),
]

TYPE_PATTERNS: Dict[DocumentType, List[FieldPattern]] = {
    DocumentType.FORM16: _SALARY_PATTERNS,
    DocumentType.SALARY_SLIP: _SALARY_PATTERNS,
    DocumentType.ANNUAL_TAX_STATEMENT: [
        ("TDS", re.compile(r"\btds\b|tax\s+deducted", re.IGNORECASE), 0.9),
        ("Reported Income", re.compile(r"total\s*income|reported\s*income", re.IGNORECASE), 0.8),
        ("Taxable Income", re.compile(r"taxable\s*income|total\s*taxable", re.IGNORECASE), 0.75),
    ],
    DocumentType.INVESTMENT_PROOF: [
        ("Eligible 80C", re.compile(r"\b80c\b|\bppf\b|\belss\b|\blic\b|\bnsc\b", re.IGNORECASE), 0.85),
    ],
    DocumentType.BANK_STATEMENT: [
        ("Interest Income", re.compile(r"interest\s*income", re.IGNORECASE), 0.75),
    ],
}


def split_lines(text: str) -> List[str]:
    return [line.strip() for line in re.split(r"\r\n|\r|\n", text or "") if line.strip()]


def _amount_after(line: str, match: re.Match) -> Optional[int]:
    remainder = line[match.end():]
    # "Deductions (80C): 1,50,000" and "Gross Salary - 12,00,000": the value sits after the last separator
    for segment in (VALUE_SEPARATOR_RE.split(remainder)[-1], remainder, line):
        amount = parse_amount(segment)
        if amount is not None:
            return amount
    return None


def _find_employer(lines: List[str]) -> Optional[str]:
    for line in lines:
        if not EMPLOYER_LINE_RE.search(line):
            continue
        name = EMPLOYER_PREFIX_RE.sub("", line, count=1).strip()
        if re.search(r"[A-Za-z]", name):
            return name
        return None
    return None


def _candidate_lines(lines: List[str]) -> List[str]:
    return [line for line in lines if CANDIDATE_KEYWORD_RE.search(line) and re.search(r"\d", line)]


def extract_heuristics(text: str, declared_type: Optional[DocumentType]) -> ExtractionResult:
    """Extract fields, summary and a quality verdict from normalized document text."""
    text = text or ""
    lines = split_lines(text)
    fields: List[ExtractedField] = []

    pan_match = PAN_RE.search(text)
    if pan_match:
        fields.append(ExtractedField(name="PAN", value=pan_match.group(0), confidence=0.95, source=SOURCE_REGEX))

    employer = _find_employer(lines)
    if employer:
        fields.append(ExtractedField(name="Employer", value=employer, confidence=0.8, source=SOURCE_LINE))

    candidates = _candidate_lines(lines)
    for name, pattern, confidence in TYPE_PATTERNS.get(declared_type, []):
        for line in candidates:
            match = pattern.search(line)
            if not match:
                continue
            amount = _amount_after(line, match)
            if amount is None:
                continue
            fields.append(ExtractedField(name=name, value=amount, confidence=confidence, source=SOURCE_LINE))
            break

    result = ExtractionResult(declared_type=declared_type, fields=fields)
    result.summary = derive_summary(fields)

    income_like = result.get_amount("Salary") is not None or result.get_amount("Reported Income") is not None
    critical = sum([pan_match is not None, income_like, result.get_amount("TDS") is not None])

    if len(text.strip()) < MIN_READABLE_CHARS:
        quality = Quality.UNREADABLE
    elif critical < MIN_CRITICAL_SIGNALS:
        quality = Quality.LOW
    else:
        quality = Quality.GOOD

    if quality != Quality.GOOD:
        result.messages = [LOW_QUALITY_MESSAGE]
    result.quality = quality

    logger.debug(
        "Heuristic extraction for %s: %d fields, quality=%s",
        declared_type.value if declared_type else "unknown",
        len(fields),
        quality.value,
    )
    return result


__all__ = ["TYPE_PATTERNS", "extract_heuristics", "split_lines"]
