"""Export schema for monthly salary slips."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from extraction.models import DocumentType, ExtractionResult

from .common import compact, field_amount


@dataclass
class SalarySlipExport:
    document_type: str = DocumentType.SALARY_SLIP.value
    gross_salary: Optional[float] = None
    deductions: Optional[float] = None

    @classmethod
    def from_extraction(cls, result: ExtractionResult) -> "SalarySlipExport":
        return cls(gross_salary=field_amount(result, "Salary"), deductions=field_amount(result, "Deductions"))

    @property
    def net_salary(self) -> Optional[float]:
        if self.gross_salary is None or self.deductions is None:
            return None
        return max(0, self.gross_salary - self.deductions)

    def to_export_dict(self) -> Dict[str, Any]:
        return compact({"document_type": self.document_type, "net_salary": self.net_salary})
