from __future__ import annotations

from typing import Iterable, List, Optional

from backend.domain_rules import DomainFinding, make_finding_id
from backend.filing_models import Document
from extraction.models import DocumentType

SALARY_TOLERANCE = 0.02
TAXABLE_INCOME_TOLERANCE = 0.05


def relative_difference(a: float, b: float) -> float:
    denom = max(abs(a), abs(b))
    if denom == 0:
        return 0.0
    return abs(a - b) / denom


def format_inr(amount: float) -> str:
    """Indian digit grouping: 1234567 -> 12,34,567."""
    sign = "-" if amount < 0 else ""
    whole = str(int(round(abs(amount))))
    if len(whole) <= 3:
        return f"{sign}{whole}"
    head, tail = whole[:-3], whole[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return f"{sign}{','.join(groups)},{tail}"


def _first_of_type(docs: List[Document], doc_type: DocumentType) -> Optional[Document]:
    for d in docs:
        if d.declared_type == doc_type:
            return d
    return None


def salary_equivalent(doc: Document) -> float:
    amount = doc.extracted.get_amount("Salary")
    return amount if amount is not None else doc.extracted.summary.income


def taxable_equivalent(doc: Document) -> float:
    amount = doc.extracted.get_amount("Taxable Income")
    return amount if amount is not None else doc.extracted.summary.taxable_income


def run_reconciliation_rules(owner_id: str, documents: Iterable[Document]) -> List[DomainFinding]:
    """Compare equivalent figures across a filer's extracted documents.

    Documents are considered in the order given (upload order); the first
    document of each type is the one compared.
    """
    docs = [d for d in documents if d.status == "extracted" and d.extracted is not None]
    findings: List[DomainFinding] = []
    idx = 0

    form16 = _first_of_type(docs, DocumentType.FORM16)
    slip = _first_of_type(docs, DocumentType.SALARY_SLIP)
    if form16 and slip:
        s1 = salary_equivalent(form16)
        s2 = salary_equivalent(slip)
        diff = relative_difference(s1, s2)
        if s1 and s2 and diff > SALARY_TOLERANCE:
            findings.append(
                DomainFinding(
                    id=make_finding_id("reconciliation", "RECON_SALARY_MISMATCH", idx),
                    owner_id=owner_id,
                    domain="reconciliation",
                    severity="medium",
                    code="RECON_SALARY_MISMATCH",
                    message=(
                        f"Salary mismatch between Form 16 (₹{format_inr(s1)}) and Salary Slip "
                        f"(₹{format_inr(s2)}). Review and correct."
                    ),
                    metadata={
                        "form16_document_id": form16.id,
                        "salary_slip_document_id": slip.id,
                        "form16_salary": s1,
                        "salary_slip_salary": s2,
                        "relative_difference": round(diff, 4),
                    },
                )
            )
            idx += 1

    statement = _first_of_type(docs, DocumentType.ANNUAL_TAX_STATEMENT)
    if form16 and statement:
        t1 = taxable_equivalent(form16)
        t2 = taxable_equivalent(statement)
        diff = relative_difference(t1, t2)
        if t1 and t2 and diff > TAXABLE_INCOME_TOLERANCE:
            findings.append(
                DomainFinding(
                    id=make_finding_id("reconciliation", "RECON_TAXABLE_INCOME_MISMATCH", idx),
                    owner_id=owner_id,
                    domain="reconciliation",
                    severity="medium",
                    code="RECON_TAXABLE_INCOME_MISMATCH",
                    message=(
                        f"Reported taxable income differs between Form 16 (₹{format_inr(t1)}) and "
                        f"26AS/AIS (₹{format_inr(t2)}). Please reconcile figures."
                    ),
                    metadata={
                        "form16_document_id": form16.id,
                        "statement_document_id": statement.id,
                        "form16_taxable_income": t1,
                        "statement_taxable_income": t2,
                        "relative_difference": round(diff, 4),
                    },
                )
            )
            idx += 1

    return findings


__all__ = [
    "SALARY_TOLERANCE",
    "TAXABLE_INCOME_TOLERANCE",
    "format_inr",
    "relative_difference",
    "run_reconciliation_rules",
]
