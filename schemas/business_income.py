"""Export schema for business / professional income documents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from extraction.models import DocumentType, ExtractionResult

from .common import compact


@dataclass
class BusinessIncomeExport:
    document_type: str = DocumentType.BUSINESS_INCOME_DOCUMENT.value
    total_income: Optional[float] = None
    total_expenses: Optional[float] = None

    @classmethod
    def from_extraction(cls, result: ExtractionResult) -> "BusinessIncomeExport":
        return cls(
            total_income=result.summary.income or None,
            total_expenses=result.summary.deductions or None,
        )

    @property
    def net_profit(self) -> Optional[float]:
        if not self.total_income:
            return None
        return max(0, self.total_income - (self.total_expenses or 0))

    def to_export_dict(self) -> Dict[str, Any]:
        return compact(
            {
                "document_type": self.document_type,
                "total_income": self.total_income,
                "total_expenses": self.total_expenses,
                "net_profit": self.net_profit,
            }
        )
