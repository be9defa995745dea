from __future__ import annotations

from typing import Dict, Optional

from extraction.models import DocumentType, ExtractionResult

SECTION_80C_LIMIT = 150000


def build_key_summary(result: ExtractionResult, limit_80c: Optional[float] = None) -> Dict[str, float]:
    """Small per-type projection of the extraction summary for display and aggregation."""
    cap = SECTION_80C_LIMIT if limit_80c is None else limit_80c
    inc = result.summary.income
    ded = result.summary.deductions
    taxable = result.summary.taxable_income
    doc_type = result.declared_type

    if doc_type in (DocumentType.FORM16, DocumentType.SALARY_SLIP):
        return {"Salary": inc, "Taxable Income": taxable, "Deductions": ded}
    if doc_type == DocumentType.ANNUAL_TAX_STATEMENT:
        return {"Reported Income": inc, "Deductions": ded, "Taxable Income": taxable}
    if doc_type == DocumentType.BANK_STATEMENT:
        return {"Interest Income (est.)": max(0, taxable - (inc - ded))}
    if doc_type == DocumentType.INVESTMENT_PROOF:
        return {"Eligible 80C (est.)": min(cap, ded)}
    if doc_type == DocumentType.RENT_RECEIPT:
        return {"HRA Basis (est.)": max(0, ded)}
    if doc_type == DocumentType.LOAN_STATEMENT:
        return {"Interest Paid (est.)": max(0, ded)}
    if doc_type == DocumentType.MEDICAL_BILL:
        return {"Medical Expense (est.)": max(0, ded)}
    if doc_type == DocumentType.CAPITAL_GAINS_REPORT:
        return {"Capital Gains (est.)": max(0, inc - taxable)}
    if doc_type == DocumentType.BUSINESS_INCOME_DOCUMENT:
        return {"Business Income": inc, "Taxable Income": taxable}
    return {"Income": inc, "Deductions": ded, "Taxable Income": taxable}


__all__ = ["SECTION_80C_LIMIT", "build_key_summary"]
