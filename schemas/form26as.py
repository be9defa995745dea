"""Export schema for Form 26AS / AIS (annual tax statement)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from extraction.models import DocumentType, ExtractionResult, FieldValue

from .common import compact, field_value


@dataclass
class AnnualTaxStatementExport:
    document_type: str = DocumentType.ANNUAL_TAX_STATEMENT.value
    pan: Optional[FieldValue] = None
    tax_deducted_at_source: Optional[FieldValue] = None

    @classmethod
    def from_extraction(cls, result: ExtractionResult) -> "AnnualTaxStatementExport":
        return cls(pan=field_value(result, "PAN") or None, tax_deducted_at_source=field_value(result, "TDS"))

    def to_export_dict(self) -> Dict[str, Any]:
        # Only TDS is visible in the statement, so it doubles as the total tax paid.
        return compact(
            {
                "document_type": self.document_type,
                "pan": self.pan,
                "tax_deducted_at_source": self.tax_deducted_at_source,
                "total_tax_paid": self.tax_deducted_at_source,
            }
        )
