"""Export schema for Section 80C investment proofs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from extraction.models import DocumentType, ExtractionResult, FieldValue

from .common import field_value


@dataclass
class InvestmentProofExport:
    document_type: str = DocumentType.INVESTMENT_PROOF.value
    amount_invested: Optional[FieldValue] = None
    investment_type: str = "ELSS"
    section: str = "80C"

    @classmethod
    def from_extraction(cls, result: ExtractionResult) -> "InvestmentProofExport":
        return cls(amount_invested=field_value(result, "Eligible 80C"))

    def to_export_dict(self) -> Dict[str, Any]:
        if self.amount_invested is None:
            return {"document_type": self.document_type}
        return {
            "document_type": self.document_type,
            "investment_type": self.investment_type,
            "amount_invested": self.amount_invested,
            "section": self.section,
        }
