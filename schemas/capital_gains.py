"""Export schema for capital gains statements."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from extraction.models import DocumentType, ExtractionResult

from .common import compact


@dataclass
class CapitalGainsExport:
    document_type: str = DocumentType.CAPITAL_GAINS_REPORT.value
    capital_gains: Optional[float] = None

    @classmethod
    def from_extraction(cls, result: ExtractionResult) -> "CapitalGainsExport":
        income = result.summary.income
        if not income:
            return cls()
        return cls(capital_gains=max(0, income - result.summary.taxable_income))

    def to_export_dict(self) -> Dict[str, Any]:
        return compact({"document_type": self.document_type, "capital_gains": self.capital_gains})
