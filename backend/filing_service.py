"""Orchestration of upload, extraction, corrections and filer-level views."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from backend.corrections import merge_corrections, validate_corrections
from backend.document_store import DocumentRepository, ItrFormRepository
from backend.domain_rules import DomainFinding
from backend.errors import (
    DocumentNotFound,
    ExtractionFailure,
    FormNotFound,
    IngestError,
    NoExtractedData,
    UploadTooLarge,
)
from backend.filing_models import (
    Document,
    FilerAggregate,
    ItrForm,
    ItrFormUpdate,
    ItrValidation,
    seed_itr_form,
)
from backend.itr_rules import validate_itr_form
from backend.key_summary import build_key_summary
from backend.reconciliation_rules import run_reconciliation_rules
from backend.settings import MAX_UPLOAD_BYTES
from backend.tax_summary import compute_filer_aggregate
from extraction.models import ExtractionResult, parse_document_type
from extraction.pdf_text import extract_pdf_text
from extraction.pipeline import PdfTextFn, extract_document
from extraction.vision import VisionExtractor
from schemas import build_export

logger = logging.getLogger(__name__)

PROCESSING_FAILED = "Processing failed"


class FilingService:
    def __init__(
        self,
        documents: DocumentRepository,
        forms: ItrFormRepository,
        *,
        vision: Optional[VisionExtractor] = None,
        pdf_text: PdfTextFn = extract_pdf_text,
        tax_context: Optional[Dict[str, Any]] = None,
        max_upload_bytes: int = MAX_UPLOAD_BYTES,
    ) -> None:
        self.documents = documents
        self.forms = forms
        self.vision = vision
        self.pdf_text = pdf_text
        self.tax_context = tax_context or {}
        self.max_upload_bytes = max_upload_bytes

    @property
    def limit_80c(self) -> Optional[float]:
        return (self.tax_context.get("limits") or {}).get("section_80c")

    @property
    def flat_rate(self) -> float:
        return (self.tax_context.get("rates") or {}).get("flat_estimate_rate", 0.10)

    # -- documents -----------------------------------------------------------------

    def ingest(
        self,
        owner_id: str,
        file_name: str,
        mime_type: str,
        content: bytes,
        declared_type: Optional[str] = None,
    ) -> Document:
        """Store an upload with status ``processing``; extraction runs separately."""
        if not content:
            raise IngestError("No file uploaded or the file is empty.")
        if len(content) > self.max_upload_bytes:
            raise UploadTooLarge(f"File exceeds the {self.max_upload_bytes} byte upload limit.")

        doc_type = parse_document_type(declared_type) or parse_document_type(file_name)
        doc = Document(
            owner_id=owner_id,
            declared_type=doc_type,
            mime_type=mime_type or "application/octet-stream",
            byte_size=len(content),
            original_file_name=file_name or "upload",
            status="processing",
        )
        self.documents.save(doc)
        self.documents.save_content(doc.id, content)
        logger.info(
            "Ingested document %s for %s (%s, %d bytes, type=%s)",
            doc.id,
            owner_id,
            doc.mime_type,
            doc.byte_size,
            doc_type.value if doc_type else "unknown",
        )
        return doc

    def _run_pipeline(self, doc: Document) -> ExtractionResult:
        content = self.documents.fetch_content(doc.id)
        if content is None:
            raise ExtractionFailure(f"No stored content for document {doc.id}")
        try:
            return extract_document(
                content,
                doc.mime_type,
                doc.declared_type,
                pdf_text=self.pdf_text,
                vision=self.vision,
            )
        except Exception as exc:
            raise ExtractionFailure(str(exc)) from exc

    def process_document(self, doc_id: str) -> Optional[Document]:
        """Run extraction for one stored document; failures are recorded, not raised."""
        doc = self.documents.get(doc_id)
        if doc is None:
            logger.warning("Document %s vanished before processing", doc_id)
            return None
        try:
            result = self._run_pipeline(doc)
        except ExtractionFailure:
            logger.exception("Extraction failed for document %s", doc_id)
            failed = doc.model_copy(update={"status": "error", "error": PROCESSING_FAILED, "extracted": None})
            self._save_if_present(failed)
            return failed

        done = doc.model_copy(update={"status": "extracted", "extracted": result, "error": None})
        self._save_if_present(done)
        logger.info("Document %s extracted with quality=%s", doc_id, result.quality.value)
        return done

    def _save_if_present(self, doc: Document) -> None:
        # A delete during processing wins; do not resurrect the record.
        if self.documents.get(doc.id) is None:
            logger.info("Document %s deleted while processing; dropping result", doc.id)
            return
        self.documents.save(doc)

    def _owned(self, owner_id: str, doc_id: str) -> Document:
        doc = self.documents.get(doc_id)
        if doc is None or doc.owner_id != owner_id:
            raise DocumentNotFound(doc_id)
        return doc

    def get_document(self, owner_id: str, doc_id: str) -> Document:
        return self._owned(owner_id, doc_id)

    def get_status(self, owner_id: str, doc_id: str) -> Dict[str, Any]:
        doc = self._owned(owner_id, doc_id)
        return {"id": doc.id, "status": doc.status, "error": doc.error}

    def list_documents(self, owner_id: str) -> List[Document]:
        return self.documents.list_for_owner(owner_id)

    def get_data(self, owner_id: str, doc_id: str) -> Dict[str, Any]:
        doc = self._owned(owner_id, doc_id)
        if doc.status != "extracted" or doc.extracted is None:
            return {"id": doc.id, "status": doc.status, "error": doc.error, "extraction": None}
        findings = self.get_findings(owner_id)
        return {
            "id": doc.id,
            "status": doc.status,
            "error": doc.error,
            "summary": doc.extracted.summary.model_dump(),
            "extraction": doc.extracted,
            "key_summary": build_key_summary(doc.extracted, self.limit_80c),
            "export": build_export(doc.extracted, rate=self.flat_rate),
            "findings": findings,
        }

    def known_fields(self, owner_id: str, exclude_id: Optional[str] = None) -> List[str]:
        """Field names already captured on the filer's other extracted documents."""
        names: List[str] = []
        for d in self.documents.list_for_owner(owner_id):
            if d.id == exclude_id or d.status != "extracted" or d.extracted is None:
                continue
            names.extend(f.name for f in d.extracted.fields)
        return names

    def apply_corrections(self, owner_id: str, doc_id: str, corrections: Iterable[Any]) -> Document:
        doc = self._owned(owner_id, doc_id)
        if doc.status != "extracted" or doc.extracted is None:
            raise NoExtractedData("Document has no extracted data to correct yet.")
        corrections = list(corrections)
        validate_corrections(
            doc.declared_type,
            doc.extracted.fields,
            corrections,
            known_fields=self.known_fields(owner_id, exclude_id=doc.id),
            context=self.tax_context,
        )
        updated = doc.model_copy(update={"extracted": merge_corrections(doc.extracted, corrections)})
        self.documents.save(updated)
        logger.info("Applied %d correction(s) to document %s", len(corrections), doc_id)
        return updated

    def delete_document(self, owner_id: str, doc_id: str) -> None:
        self._owned(owner_id, doc_id)
        self.documents.delete(doc_id)
        logger.info("Deleted document %s", doc_id)

    # -- filer views -----------------------------------------------------------------

    def get_aggregate(self, owner_id: str) -> FilerAggregate:
        return compute_filer_aggregate(self.documents.list_for_owner(owner_id), self.tax_context)

    def get_findings(self, owner_id: str) -> List[DomainFinding]:
        return run_reconciliation_rules(owner_id, self.documents.list_for_owner(owner_id))

    # -- ITR form --------------------------------------------------------------------

    def get_itr_form(self, owner_id: str, form_id: str) -> ItrForm:
        form = self.forms.get(form_id)
        if form is None:
            form = self.forms.save(seed_itr_form(form_id, owner_id))
            logger.info("Seeded ITR form %s for %s", form_id, owner_id)
        if form.owner_id != owner_id:
            raise FormNotFound(form_id)
        return form

    def update_itr_form(self, owner_id: str, form_id: str, update: ItrFormUpdate) -> ItrForm:
        form = self.get_itr_form(owner_id, form_id)
        changes = {
            name: getattr(update, name)
            for name in ("income", "deductions", "investments", "taxes_paid", "notes")
            if getattr(update, name) is not None
        }
        return self.forms.save(form.model_copy(update=changes))

    def validate_itr_form(self, owner_id: str, form_id: str) -> ItrValidation:
        return validate_itr_form(self.get_itr_form(owner_id, form_id), self.tax_context)

    def submit_itr_form(self, owner_id: str, form_id: str) -> Dict[str, Any]:
        """Mark the form submitted; validation issues are returned but do not block."""
        form = self.get_itr_form(owner_id, form_id)
        validation = validate_itr_form(form, self.tax_context)
        submitted = self.forms.save(form.model_copy(update={"status": "submitted"}))
        if validation.issues:
            logger.info("ITR form %s submitted with %d open issue(s)", form_id, len(validation.issues))
        return {"form": submitted, "validation": validation}


__all__ = ["FilingService", "PROCESSING_FAILED"]
