"""Export schema for bank statements and interest certificates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from extraction.models import DocumentType, ExtractionResult, FieldValue

from .common import compact, field_value


@dataclass
class BankStatementExport:
    document_type: str = DocumentType.BANK_STATEMENT.value
    interest_income: Optional[FieldValue] = None

    @classmethod
    def from_extraction(cls, result: ExtractionResult) -> "BankStatementExport":
        return cls(interest_income=field_value(result, "Interest Income"))

    def to_export_dict(self) -> Dict[str, Any]:
        return compact({"document_type": self.document_type, "interest_income": self.interest_income})
