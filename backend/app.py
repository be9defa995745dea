"""FastAPI surface for the ITR filing assistant.

Uploads are stored immediately and extracted in a background task; the
filer-level aggregate and reconciliation findings are recomputed on every read
from the current document set.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from fastapi import BackgroundTasks, Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from backend.deps import get_filing_service, get_owner_id
from backend.errors import CorrectionRejected, FilingError
from backend.filing_models import ItrForm, ItrFormUpdate, ItrValidation
from backend.filing_service import FilingService
from backend.schemas import (
    AggregateResponse,
    DocumentDataResponse,
    DocumentListResponse,
    DocumentMetadata,
    DocumentStatusResponse,
    FeedbackRequest,
    FeedbackResponse,
    FindingsResponse,
    ItrSubmitResponse,
    document_metadata,
)
from backend.settings import get_settings

logger = logging.getLogger("itr-filing-api")
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

settings = get_settings()

app = FastAPI(
    title="ITR Filing Assistant API",
    description="Tax document extraction, reconciliation and ITR validation.",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings["allowed_origins"] or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/api/documents/upload", response_model=DocumentMetadata, status_code=201)
async def upload_document(
    background_tasks: BackgroundTasks,
    file: Optional[UploadFile] = File(None),
    docType: Optional[str] = Form(None),
    owner_id: str = Depends(get_owner_id),
    service: FilingService = Depends(get_filing_service),
) -> DocumentMetadata:
    content = await file.read() if file is not None else b""
    doc = service.ingest(
        owner_id,
        file.filename if file is not None else "",
        file.content_type if file is not None else "",
        content,
        declared_type=docType,
    )
    background_tasks.add_task(service.process_document, doc.id)
    return document_metadata(doc)


@app.get("/api/documents", response_model=DocumentListResponse)
def list_documents(
    owner_id: str = Depends(get_owner_id),
    service: FilingService = Depends(get_filing_service),
) -> DocumentListResponse:
    return DocumentListResponse(documents=[document_metadata(d) for d in service.list_documents(owner_id)])


@app.get("/api/documents/{doc_id}/status", response_model=DocumentStatusResponse)
def document_status(
    doc_id: str,
    owner_id: str = Depends(get_owner_id),
    service: FilingService = Depends(get_filing_service),
) -> DocumentStatusResponse:
    return DocumentStatusResponse(**service.get_status(owner_id, doc_id))


@app.get("/api/documents/{doc_id}/data", response_model=DocumentDataResponse)
def document_data(
    doc_id: str,
    owner_id: str = Depends(get_owner_id),
    service: FilingService = Depends(get_filing_service),
) -> DocumentDataResponse:
    return DocumentDataResponse(**service.get_data(owner_id, doc_id))


@app.post("/api/documents/{doc_id}/feedback", response_model=FeedbackResponse)
def document_feedback(
    doc_id: str,
    payload: FeedbackRequest,
    owner_id: str = Depends(get_owner_id),
    service: FilingService = Depends(get_filing_service),
) -> FeedbackResponse:
    doc = service.apply_corrections(owner_id, doc_id, payload.fields)
    return FeedbackResponse(extraction=doc.extracted)


@app.delete("/api/documents/{doc_id}")
def delete_document(
    doc_id: str,
    owner_id: str = Depends(get_owner_id),
    service: FilingService = Depends(get_filing_service),
) -> Dict[str, bool]:
    service.delete_document(owner_id, doc_id)
    return {"ok": True}


@app.get("/api/filer/aggregate", response_model=AggregateResponse)
def filer_aggregate(
    owner_id: str = Depends(get_owner_id),
    service: FilingService = Depends(get_filing_service),
) -> AggregateResponse:
    aggregate = service.get_aggregate(owner_id)
    return AggregateResponse(owner_id=owner_id, **aggregate.model_dump())


@app.get("/api/filer/findings", response_model=FindingsResponse)
def filer_findings(
    owner_id: str = Depends(get_owner_id),
    service: FilingService = Depends(get_filing_service),
) -> FindingsResponse:
    return FindingsResponse(owner_id=owner_id, findings=service.get_findings(owner_id))


@app.get("/api/itr/{form_id}", response_model=ItrForm)
def get_itr_form(
    form_id: str,
    owner_id: str = Depends(get_owner_id),
    service: FilingService = Depends(get_filing_service),
) -> ItrForm:
    return service.get_itr_form(owner_id, form_id)


@app.put("/api/itr/{form_id}", response_model=ItrForm)
def update_itr_form(
    form_id: str,
    payload: ItrFormUpdate,
    owner_id: str = Depends(get_owner_id),
    service: FilingService = Depends(get_filing_service),
) -> ItrForm:
    return service.update_itr_form(owner_id, form_id, payload)


@app.post("/api/itr/{form_id}/validate", response_model=ItrValidation)
def validate_itr_form(
    form_id: str,
    owner_id: str = Depends(get_owner_id),
    service: FilingService = Depends(get_filing_service),
) -> ItrValidation:
    return service.validate_itr_form(owner_id, form_id)


@app.post("/api/itr/{form_id}/submit", response_model=ItrSubmitResponse)
def submit_itr_form(
    form_id: str,
    owner_id: str = Depends(get_owner_id),
    service: FilingService = Depends(get_filing_service),
) -> ItrSubmitResponse:
    return ItrSubmitResponse(**service.submit_itr_form(owner_id, form_id))


@app.exception_handler(FilingError)
async def filing_error_handler(_, exc: FilingError):  # type: ignore[override]
    payload: Dict[str, Any] = {"detail": exc.message}
    if isinstance(exc, CorrectionRejected):
        payload["errors"] = exc.errors
    return fastapi_response(exc.status_code, payload)


@app.exception_handler(HTTPException)
async def http_error_handler(_, exc: HTTPException):  # type: ignore[override]
    return fastapi_response(exc.status_code, {"detail": exc.detail})


@app.exception_handler(Exception)
async def unhandled_error_handler(_, exc: Exception):  # type: ignore[override]
    logger.exception("Unhandled error: %s", exc)
    return fastapi_response(500, {"detail": "Internal server error"})


def fastapi_response(status_code: int, payload: Dict[str, Any]):
    from fastapi.responses import JSONResponse

    return JSONResponse(status_code=status_code, content=payload)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("backend.app:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), reload=True)
