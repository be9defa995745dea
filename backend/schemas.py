from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from backend.domain_rules import DomainFinding
from backend.filing_models import FieldCorrection, FilerAggregate, ItrForm, ItrValidation
from extraction.models import ExtractionResult, ExtractionSummary


class DocumentMetadata(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    declared_type: Optional[str] = None
    mime_type: str
    byte_size: int
    original_file_name: str
    uploaded_at: datetime
    status: str
    error: Optional[str] = None


class DocumentListResponse(BaseModel):
    documents: List[DocumentMetadata]


class DocumentStatusResponse(BaseModel):
    id: str
    status: str
    error: Optional[str] = None


class DocumentDataResponse(BaseModel):
    id: str
    status: str
    error: Optional[str] = None
    summary: Optional[ExtractionSummary] = None
    extraction: Optional[ExtractionResult] = None
    key_summary: Dict[str, float] = Field(default_factory=dict)
    export: Dict[str, Any] = Field(default_factory=dict)
    findings: List[DomainFinding] = Field(default_factory=list)


class FeedbackRequest(BaseModel):
    fields: List[FieldCorrection]


class FeedbackResponse(BaseModel):
    ok: bool = True
    extraction: ExtractionResult


class FindingsResponse(BaseModel):
    owner_id: str
    findings: List[DomainFinding]


class AggregateResponse(FilerAggregate):
    owner_id: str


class ItrSubmitResponse(BaseModel):
    form: ItrForm
    validation: ItrValidation


def document_metadata(doc) -> DocumentMetadata:
    return DocumentMetadata(
        id=doc.id,
        owner_id=doc.owner_id,
        declared_type=doc.declared_type.value if doc.declared_type else None,
        mime_type=doc.mime_type,
        byte_size=doc.byte_size,
        original_file_name=doc.original_file_name,
        uploaded_at=doc.uploaded_at,
        status=doc.status,
        error=doc.error,
    )
