from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from backend.filing_models import Document, FilerAggregate
from backend.key_summary import SECTION_80C_LIMIT, build_key_summary
from extraction.amounts import round_half_up
from extraction.models import DocumentType

# Placeholder flat rate used when no tax-year config is supplied. Not a slab computation.
DEFAULT_FLAT_RATE = 0.10

ITR1 = "ITR-1 (Sahaj)"
ITR2 = "ITR-2"
ITR3 = "ITR-3"

DEDUCTION_PROOF_TYPES = (
    DocumentType.INVESTMENT_PROOF,
    DocumentType.MEDICAL_BILL,
    DocumentType.RENT_RECEIPT,
    DocumentType.LOAN_STATEMENT,
)


def _limits(context: Optional[Dict[str, Any]]) -> tuple:
    context = context or {}
    rate = (context.get("rates") or {}).get("flat_estimate_rate", DEFAULT_FLAT_RATE)
    limit_80c = (context.get("limits") or {}).get("section_80c", SECTION_80C_LIMIT)
    return float(rate), limit_80c


def recommend_itr_form(doc_types: Set[DocumentType]) -> Tuple[str, str]:
    """Pick the ITR form from the types of the filer's extracted documents.

    Business income needs ITR-3; capital gains, rent or any income source
    without a salary document points to ITR-2; salary and interest stay on ITR-1.
    """
    if not doc_types:
        return ITR1, "No extracted documents yet; salary and interest income only is assumed."
    if DocumentType.BUSINESS_INCOME_DOCUMENT in doc_types:
        return ITR3, "Income from business/profession."
    if DocumentType.CAPITAL_GAINS_REPORT in doc_types:
        return ITR2, "Capital gains income present."
    if DocumentType.RENT_RECEIPT in doc_types:
        return ITR2, "Income from house property (rent) likely."
    if not doc_types & {DocumentType.FORM16, DocumentType.SALARY_SLIP}:
        return ITR2, "Multiple income sources detected."
    return ITR1, "Income from salary and/or interest only."


def missing_deduction_proofs(documents: Iterable[Document]) -> List[str]:
    """Deduction proof types the filer has not uploaded, whatever their status."""
    uploaded = {doc.declared_type for doc in documents}
    return [t.value for t in DEDUCTION_PROOF_TYPES if t not in uploaded]


def compute_filer_aggregate(documents: Iterable[Document], context: Optional[Dict[str, Any]] = None) -> FilerAggregate:
    """Recompute filer-wide totals from the current document set.

    Only documents with status ``extracted`` count toward totals and the form
    recommendation; anything still processing or in error contributes nothing.
    """
    documents = list(documents)
    rate, limit_80c = _limits(context)

    total_salary = 0.0
    taxable_income = 0.0
    total_deductions = 0.0
    total_tds = 0.0
    total_investments = 0.0
    total_interest = 0.0
    extracted_types: Set[DocumentType] = set()
    count = 0

    for doc in documents:
        if doc.status != "extracted" or doc.extracted is None:
            continue
        count += 1
        if doc.declared_type is not None:
            extracted_types.add(doc.declared_type)
        summary = build_key_summary(doc.extracted, limit_80c)
        total_salary += summary.get("Salary", 0)
        taxable_income += summary.get("Taxable Income", 0)
        total_deductions += summary.get("Deductions", 0) + summary.get("Eligible 80C (est.)", 0)
        fmap = doc.extracted.field_map()
        total_tds += _amount(fmap.get("tds"))
        total_investments += _amount(fmap.get("eligible 80c"))
        total_interest += _amount(fmap.get("interest income"))

    estimated_tax = round_half_up(max(0.0, taxable_income) * rate)
    form, reason = recommend_itr_form(extracted_types)
    return FilerAggregate(
        total_salary=total_salary,
        total_deductions=total_deductions,
        taxable_income=taxable_income,
        total_tds=total_tds,
        estimated_tax=estimated_tax,
        refund=max(0.0, total_tds - estimated_tax),
        tax_payable=max(0.0, estimated_tax - total_tds),
        total_investments=total_investments,
        total_interest=total_interest,
        section_80c_headroom=max(0.0, limit_80c - total_deductions),
        recommended_form=form,
        recommendation_reason=reason,
        missing_deduction_proofs=missing_deduction_proofs(documents),
        document_count=count,
        tax_rate=rate,
    )


def _amount(field) -> float:
    if field is None or isinstance(field.value, (str, bool)):
        return 0.0
    return float(field.value)


__all__ = [
    "DEDUCTION_PROOF_TYPES",
    "DEFAULT_FLAT_RATE",
    "compute_filer_aggregate",
    "missing_deduction_proofs",
    "recommend_itr_form",
]
