"""Export schema for Form 16 (employer TDS certificate)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from extraction.amounts import round_half_up
from extraction.models import DocumentType, ExtractionResult, FieldValue

from .common import compact, field_amount, field_value

FLAT_ESTIMATE_RATE = 0.10


@dataclass
class Form16Export:
    document_type: str = DocumentType.FORM16.value
    pan: Optional[FieldValue] = None
    employer_name: Optional[FieldValue] = None
    gross_salary: Optional[FieldValue] = None
    deductions_80c: Optional[float] = None
    has_deductions: bool = False
    tds_deducted: Optional[FieldValue] = None
    tax_payable: Optional[int] = None

    @classmethod
    def from_extraction(cls, result: ExtractionResult, rate: float = FLAT_ESTIMATE_RATE) -> "Form16Export":
        tax_payable = max(0, round_half_up(result.summary.taxable_income * rate))
        return cls(
            pan=field_value(result, "PAN") or None,
            employer_name=field_value(result, "Employer") or None,
            gross_salary=field_value(result, "Salary"),
            deductions_80c=field_amount(result, "Deductions"),
            has_deductions=field_value(result, "Deductions") is not None,
            tds_deducted=field_value(result, "TDS"),
            tax_payable=tax_payable or None,
        )

    def to_export_dict(self) -> Dict[str, Any]:
        return compact(
            {
                "document_type": self.document_type,
                "PAN": self.pan,
                "employer_name": self.employer_name,
                "gross_salary": self.gross_salary,
                "deductions": {"section_80C": self.deductions_80c} if self.has_deductions else None,
                "tds_deducted": self.tds_deducted,
                "tax_payable": self.tax_payable,
            }
        )
