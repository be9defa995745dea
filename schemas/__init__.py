"""Canonical per-document-type export schemas."""

from __future__ import annotations

from typing import Any, Dict

from extraction.models import DocumentType, ExtractionResult

from .bank_statement import BankStatementExport
from .business_income import BusinessIncomeExport
from .capital_gains import CapitalGainsExport
from .expense_receipts import LoanStatementExport, MedicalBillExport, RentReceiptExport
from .form16 import FLAT_ESTIMATE_RATE, Form16Export
from .form26as import AnnualTaxStatementExport
from .investment_proof import InvestmentProofExport
from .salary_slip import SalarySlipExport

EXPORT_SCHEMAS = {
    DocumentType.FORM16: Form16Export,
    DocumentType.ANNUAL_TAX_STATEMENT: AnnualTaxStatementExport,
    DocumentType.SALARY_SLIP: SalarySlipExport,
    DocumentType.BANK_STATEMENT: BankStatementExport,
    DocumentType.INVESTMENT_PROOF: InvestmentProofExport,
    DocumentType.RENT_RECEIPT: RentReceiptExport,
    DocumentType.LOAN_STATEMENT: LoanStatementExport,
    DocumentType.MEDICAL_BILL: MedicalBillExport,
    DocumentType.CAPITAL_GAINS_REPORT: CapitalGainsExport,
    DocumentType.BUSINESS_INCOME_DOCUMENT: BusinessIncomeExport,
}


def build_export(result: ExtractionResult, rate: float = FLAT_ESTIMATE_RATE) -> Dict[str, Any]:
    """Project an extraction result onto its type's canonical export JSON."""
    schema = EXPORT_SCHEMAS.get(result.declared_type)
    if schema is None:
        return {"document_type": result.declared_type.value if result.declared_type else None}
    if schema is Form16Export:
        return Form16Export.from_extraction(result, rate=rate).to_export_dict()
    return schema.from_extraction(result).to_export_dict()


__all__ = ["EXPORT_SCHEMAS", "build_export"]
