from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from extraction.models import DocumentType, ExtractionResult, FieldValue

DocumentStatus = Literal["pending", "processing", "extracted", "error"]
FormStatus = Literal["draft", "submitted"]


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Document(BaseModel):
    """An uploaded tax document and, once processed, its extraction result."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=new_id)
    owner_id: str
    declared_type: Optional[DocumentType] = None
    mime_type: str
    byte_size: int = 0
    original_file_name: str
    uploaded_at: datetime = Field(default_factory=utcnow)
    status: DocumentStatus = "pending"
    extracted: Optional[ExtractionResult] = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def _extracted_matches_status(self) -> "Document":
        if (self.extracted is not None) != (self.status == "extracted"):
            raise ValueError("extracted data must be present exactly when status is 'extracted'")
        return self


class FieldCorrection(BaseModel):
    name: str = Field(min_length=1)
    value: FieldValue


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class IncomeSection(_CamelModel):
    salary: float = 0
    interest: float = 0
    rental_income: float = Field(0, alias="rentalIncome")
    other_income: float = Field(0, alias="otherIncome")


class DeductionsSection(_CamelModel):
    section_80c: float = Field(0, alias="section80C")
    section_80d: float = Field(0, alias="section80D")
    charitable_donations: float = Field(0, alias="charitableDonations")


class InvestmentsSection(_CamelModel):
    ppf: float = 0
    elss: float = 0
    nps: float = 0


class TaxesPaidSection(_CamelModel):
    tds: float = 0
    advance_tax: float = Field(0, alias="advanceTax")
    self_assessment_tax: float = Field(0, alias="selfAssessmentTax")


class ItrForm(_CamelModel):
    """Consolidated filer-level income tax return draft."""

    id: str
    owner_id: str = Field(alias="ownerId")
    income: IncomeSection = Field(default_factory=IncomeSection)
    deductions: DeductionsSection = Field(default_factory=DeductionsSection)
    investments: InvestmentsSection = Field(default_factory=InvestmentsSection)
    taxes_paid: TaxesPaidSection = Field(default_factory=TaxesPaidSection, alias="taxesPaid")
    notes: str = ""
    status: FormStatus = "draft"


class ItrFormUpdate(_CamelModel):
    """Full-section replacement payload; omitted sections are left as they are."""

    income: Optional[IncomeSection] = None
    deductions: Optional[DeductionsSection] = None
    investments: Optional[InvestmentsSection] = None
    taxes_paid: Optional[TaxesPaidSection] = Field(None, alias="taxesPaid")
    notes: Optional[str] = None


def seed_itr_form(form_id: str, owner_id: str) -> ItrForm:
    return ItrForm(
        id=form_id,
        owner_id=owner_id,
        income=IncomeSection(salary=1200000, interest=15000, rental_income=0, other_income=5000),
        deductions=DeductionsSection(section_80c=150000, section_80d=25000, charitable_donations=10000),
        investments=InvestmentsSection(ppf=60000, elss=40000, nps=20000),
        taxes_paid=TaxesPaidSection(tds=90000, advance_tax=10000, self_assessment_tax=0),
        notes="Imported from extracted documents.",
        status="draft",
    )


class ValidationIssue(BaseModel):
    field: str
    code: str
    message: str
    severity: Literal["low", "medium", "high"] = "medium"


class ItrValidation(BaseModel):
    total_income: float
    total_deductions: float
    issues: List[ValidationIssue] = Field(default_factory=list)


class FilerAggregate(BaseModel):
    total_salary: float = 0
    total_deductions: float = 0
    taxable_income: float = 0
    total_tds: float = 0
    estimated_tax: int = 0
    refund: float = 0
    tax_payable: float = 0
    total_investments: float = 0
    total_interest: float = 0
    section_80c_headroom: float = 0
    recommended_form: str = "ITR-1 (Sahaj)"
    recommendation_reason: str = ""
    missing_deduction_proofs: List[str] = Field(default_factory=list)
    document_count: int = 0
    tax_rate: float = 0


KeySummary = Dict[str, float]
ExportPayload = Dict[str, Any]


__all__ = [
    "DeductionsSection",
    "Document",
    "DocumentStatus",
    "ExportPayload",
    "FieldCorrection",
    "FilerAggregate",
    "IncomeSection",
    "InvestmentsSection",
    "ItrForm",
    "ItrFormUpdate",
    "ItrValidation",
    "KeySummary",
    "TaxesPaidSection",
    "ValidationIssue",
    "new_id",
    "seed_itr_form",
    "utcnow",
]
