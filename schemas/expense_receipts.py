"""Export schemas for deduction-style receipts: rent, loan interest and medical bills.

All three usually expose a single total; when no dedicated field was captured
the generic Deductions figure stands in for it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from extraction.models import DocumentType, ExtractionResult, FieldValue

from .common import compact, field_value


def _first_value(result: ExtractionResult, *names: str) -> Optional[FieldValue]:
    for name in names:
        value = field_value(result, name)
        if value is not None:
            return value
    return None


@dataclass
class RentReceiptExport:
    document_type: str = DocumentType.RENT_RECEIPT.value
    total_rent_paid: Optional[FieldValue] = None

    @classmethod
    def from_extraction(cls, result: ExtractionResult) -> "RentReceiptExport":
        return cls(total_rent_paid=field_value(result, "Deductions"))

    def to_export_dict(self) -> Dict[str, Any]:
        return compact({"document_type": self.document_type, "total_rent_paid": self.total_rent_paid})


@dataclass
class LoanStatementExport:
    document_type: str = DocumentType.LOAN_STATEMENT.value
    interest_paid: Optional[FieldValue] = None

    @classmethod
    def from_extraction(cls, result: ExtractionResult) -> "LoanStatementExport":
        return cls(interest_paid=_first_value(result, "Interest Paid", "Deductions"))

    def to_export_dict(self) -> Dict[str, Any]:
        return compact({"document_type": self.document_type, "interest_paid": self.interest_paid})


@dataclass
class MedicalBillExport:
    document_type: str = DocumentType.MEDICAL_BILL.value
    amount_paid: Optional[FieldValue] = None

    @classmethod
    def from_extraction(cls, result: ExtractionResult) -> "MedicalBillExport":
        return cls(amount_paid=_first_value(result, "Medical Expense", "Deductions"))

    def to_export_dict(self) -> Dict[str, Any]:
        return compact({"document_type": self.document_type, "amount_paid": self.amount_paid})
