from __future__ import annotations

import re
from enum import Enum
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

FieldValue = Union[int, float, str]
FieldSource = Literal["rule:regex", "rule:line", "ocr:vision", "user:manual"]

SOURCE_REGEX = "rule:regex"
SOURCE_LINE = "rule:line"
SOURCE_VISION = "ocr:vision"
SOURCE_MANUAL = "user:manual"

LOW_QUALITY_MESSAGE = (
    "We were unable to extract all necessary details accurately from this document. "
    "Please either upload a clearer / higher quality version or enter the details manually."
)


class DocumentType(str, Enum):
    """Document categories a filer can declare at upload time."""

    FORM16 = "Form 16"
    ANNUAL_TAX_STATEMENT = "Form 26AS/AIS"
    SALARY_SLIP = "Salary Slip"
    BANK_STATEMENT = "Bank Statement"
    INVESTMENT_PROOF = "Investment Proof"
    RENT_RECEIPT = "Rent Receipt"
    LOAN_STATEMENT = "Loan Statement"
    MEDICAL_BILL = "Medical Bill"
    CAPITAL_GAINS_REPORT = "Capital Gains Report"
    BUSINESS_INCOME_DOCUMENT = "Business Income Document"


# Checked in order; the salary slip pattern must not be shadowed by a looser one.
_TYPE_PATTERNS = [
    (re.compile(r"form\s*-?\s*16", re.IGNORECASE), DocumentType.FORM16),
    (re.compile(r"26\s*as|\bais\b|annual\s*(tax|information)\s*statement", re.IGNORECASE), DocumentType.ANNUAL_TAX_STATEMENT),
    (re.compile(r"salary[\s_\-]*slip|pay[\s_\-]*slip", re.IGNORECASE), DocumentType.SALARY_SLIP),
    (re.compile(r"bank", re.IGNORECASE), DocumentType.BANK_STATEMENT),
    (re.compile(r"investment", re.IGNORECASE), DocumentType.INVESTMENT_PROOF),
    (re.compile(r"rent", re.IGNORECASE), DocumentType.RENT_RECEIPT),
    (re.compile(r"loan", re.IGNORECASE), DocumentType.LOAN_STATEMENT),
    (re.compile(r"medical", re.IGNORECASE), DocumentType.MEDICAL_BILL),
    (re.compile(r"capital[\s_\-]*gains?", re.IGNORECASE), DocumentType.CAPITAL_GAINS_REPORT),
    (re.compile(r"business", re.IGNORECASE), DocumentType.BUSINESS_INCOME_DOCUMENT),
]


def parse_document_type(raw: Optional[str]) -> Optional[DocumentType]:
    """Resolve a declared label, enum name or loose file name to a DocumentType."""
    if raw is None:
        return None
    if isinstance(raw, DocumentType):
        return raw
    text = str(raw).strip()
    if not text:
        return None
    for member in DocumentType:
        if text.lower() in (member.value.lower(), member.name.lower()):
            return member
    for pattern, member in _TYPE_PATTERNS:
        if pattern.search(text):
            return member
    return None


def canonical_name(name: str) -> str:
    """Case-folded, whitespace-collapsed field name used for every lookup."""
    return " ".join(str(name).split()).casefold()


def field_key(name: str) -> str:
    """Snake-case key exposing a field to rule conditions ("Eligible 80C" -> eligible_80c)."""
    return re.sub(r"[^0-9a-z]+", "_", canonical_name(name)).strip("_")


def as_amount(value: Optional[FieldValue]) -> Optional[float]:
    """Numeric view of a field value; text values have no amount."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return value
    return None


class Quality(str, Enum):
    GOOD = "good"
    LOW = "low"
    UNREADABLE = "unreadable"


class ExtractedField(BaseModel):
    """A single labelled value pulled out of a document."""

    name: str
    value: FieldValue
    confidence: float = Field(ge=0.0, le=1.0)
    source: FieldSource

    @model_validator(mode="after")
    def _manual_is_certain(self) -> "ExtractedField":
        if self.source == SOURCE_MANUAL and self.confidence != 1.0:
            raise ValueError("user:manual fields must carry confidence 1.0")
        return self


class ExtractionSummary(BaseModel):
    income: float = 0
    deductions: float = 0
    taxable_income: float = 0


class ExtractionResult(BaseModel):
    """Fields, derived summary and quality verdict for one document."""

    declared_type: Optional[DocumentType] = None
    quality: Quality = Quality.GOOD
    fields: List[ExtractedField] = Field(default_factory=list)
    summary: ExtractionSummary = Field(default_factory=ExtractionSummary)
    messages: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _explain_bad_quality(self) -> "ExtractionResult":
        if self.quality != Quality.GOOD and not self.messages:
            raise ValueError("a non-good quality verdict needs an explanatory message")
        return self

    def field_map(self) -> Dict[str, ExtractedField]:
        """First field per canonical name, except that a manual field always wins."""
        mapping: Dict[str, ExtractedField] = {}
        for f in self.fields:
            key = canonical_name(f.name)
            current = mapping.get(key)
            if current is None or (f.source == SOURCE_MANUAL and current.source != SOURCE_MANUAL):
                mapping[key] = f
        return mapping

    def get_field(self, name: str) -> Optional[ExtractedField]:
        return self.field_map().get(canonical_name(name))

    def get_value(self, name: str) -> Optional[FieldValue]:
        f = self.get_field(name)
        return f.value if f is not None else None

    def get_amount(self, name: str) -> Optional[float]:
        return as_amount(self.get_value(name))


def derive_summary(result_fields: List[ExtractedField]) -> ExtractionSummary:
    """Income / deductions / taxable income precedence shared by extraction and corrections."""
    view = ExtractionResult(fields=list(result_fields))

    def first_amount(*names: str) -> Optional[float]:
        for n in names:
            amount = view.get_amount(n)
            if amount is not None:
                return amount
        return None

    income = first_amount("Salary", "Reported Income")
    deductions = first_amount("Deductions", "Eligible 80C")
    income = income if income is not None else 0
    deductions = deductions if deductions is not None else 0
    taxable = view.get_amount("Taxable Income")
    if taxable is None:
        taxable = max(0, income - deductions)
    return ExtractionSummary(income=income, deductions=deductions, taxable_income=taxable)


__all__ = [
    "DocumentType",
    "ExtractedField",
    "ExtractionResult",
    "ExtractionSummary",
    "FieldValue",
    "LOW_QUALITY_MESSAGE",
    "Quality",
    "SOURCE_LINE",
    "SOURCE_MANUAL",
    "SOURCE_REGEX",
    "SOURCE_VISION",
    "as_amount",
    "canonical_name",
    "derive_summary",
    "field_key",
    "parse_document_type",
]
