"""Storage for documents, their raw bytes and ITR forms.

Two interchangeable backends: process-local dicts (tests, single-process demos)
and SQLAlchemy tables. Both list documents in upload order.
"""

from __future__ import annotations

import threading
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from backend.db_models import DocumentORM, ItrFormORM
from backend.filing_models import (
    DeductionsSection,
    Document,
    IncomeSection,
    InvestmentsSection,
    ItrForm,
    TaxesPaidSection,
)
from extraction.models import ExtractionResult, parse_document_type

SessionFactory = Callable[[], Session]


class DocumentRepository:
    def save(self, doc: Document) -> Document:
        raise NotImplementedError

    def get(self, doc_id: str) -> Optional[Document]:
        raise NotImplementedError

    def list_for_owner(self, owner_id: str) -> List[Document]:
        raise NotImplementedError

    def delete(self, doc_id: str) -> bool:
        raise NotImplementedError

    def save_content(self, doc_id: str, content: bytes) -> None:
        raise NotImplementedError

    def fetch_content(self, doc_id: str) -> Optional[bytes]:
        raise NotImplementedError


class ItrFormRepository:
    def get(self, form_id: str) -> Optional[ItrForm]:
        raise NotImplementedError

    def save(self, form: ItrForm) -> ItrForm:
        raise NotImplementedError


class InMemoryDocumentRepository(DocumentRepository):
    def __init__(self) -> None:
        self._docs: Dict[str, Document] = {}
        self._content: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def save(self, doc: Document) -> Document:
        with self._lock:
            self._docs[doc.id] = doc.model_copy(deep=True)
        return doc

    def get(self, doc_id: str) -> Optional[Document]:
        with self._lock:
            doc = self._docs.get(doc_id)
            return doc.model_copy(deep=True) if doc else None

    def list_for_owner(self, owner_id: str) -> List[Document]:
        with self._lock:
            return [d.model_copy(deep=True) for d in self._docs.values() if d.owner_id == owner_id]

    def delete(self, doc_id: str) -> bool:
        with self._lock:
            self._content.pop(doc_id, None)
            return self._docs.pop(doc_id, None) is not None

    def save_content(self, doc_id: str, content: bytes) -> None:
        with self._lock:
            self._content[doc_id] = content

    def fetch_content(self, doc_id: str) -> Optional[bytes]:
        with self._lock:
            return self._content.get(doc_id)

    def clear(self) -> None:
        with self._lock:
            self._docs.clear()
            self._content.clear()


class InMemoryItrFormRepository(ItrFormRepository):
    def __init__(self) -> None:
        self._forms: Dict[str, ItrForm] = {}
        self._lock = threading.Lock()

    def get(self, form_id: str) -> Optional[ItrForm]:
        with self._lock:
            form = self._forms.get(form_id)
            return form.model_copy(deep=True) if form else None

    def save(self, form: ItrForm) -> ItrForm:
        with self._lock:
            self._forms[form.id] = form.model_copy(deep=True)
        return form


def _document_from_row(row: DocumentORM) -> Document:
    return Document(
        id=row.id,
        owner_id=row.owner_id,
        declared_type=parse_document_type(row.declared_type),
        mime_type=row.mime_type,
        byte_size=row.byte_size,
        original_file_name=row.original_file_name,
        uploaded_at=row.uploaded_at,
        status=row.status,
        extracted=ExtractionResult.model_validate(row.extracted) if row.extracted else None,
        error=row.error,
    )


class SqlDocumentRepository(DocumentRepository):
    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def save(self, doc: Document) -> Document:
        with self._session_factory() as db:
            row = db.query(DocumentORM).filter(DocumentORM.id == doc.id).first()
            if row is None:
                row = DocumentORM(id=doc.id)
                db.add(row)
            row.owner_id = doc.owner_id
            row.declared_type = doc.declared_type.value if doc.declared_type else None
            row.mime_type = doc.mime_type
            row.byte_size = doc.byte_size
            row.original_file_name = doc.original_file_name
            row.uploaded_at = doc.uploaded_at
            row.status = doc.status
            row.extracted = doc.extracted.model_dump(mode="json") if doc.extracted else None
            row.error = doc.error
            db.commit()
        return doc

    def get(self, doc_id: str) -> Optional[Document]:
        with self._session_factory() as db:
            row = db.query(DocumentORM).filter(DocumentORM.id == doc_id).first()
            return _document_from_row(row) if row else None

    def list_for_owner(self, owner_id: str) -> List[Document]:
        with self._session_factory() as db:
            rows = db.query(DocumentORM).filter(DocumentORM.owner_id == owner_id).order_by(DocumentORM.seq).all()
            return [_document_from_row(r) for r in rows]

    def delete(self, doc_id: str) -> bool:
        with self._session_factory() as db:
            deleted = db.query(DocumentORM).filter(DocumentORM.id == doc_id).delete()
            db.commit()
            return bool(deleted)

    def save_content(self, doc_id: str, content: bytes) -> None:
        with self._session_factory() as db:
            row = db.query(DocumentORM).filter(DocumentORM.id == doc_id).first()
            if row is None:
                raise KeyError(doc_id)
            row.content = content
            db.commit()

    def fetch_content(self, doc_id: str) -> Optional[bytes]:
        with self._session_factory() as db:
            row = db.query(DocumentORM).filter(DocumentORM.id == doc_id).first()
            return row.content if row else None


class SqlItrFormRepository(ItrFormRepository):
    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def get(self, form_id: str) -> Optional[ItrForm]:
        with self._session_factory() as db:
            row = db.query(ItrFormORM).filter(ItrFormORM.id == form_id).first()
            if row is None:
                return None
            return ItrForm(
                id=row.id,
                owner_id=row.owner_id,
                income=IncomeSection.model_validate(row.income),
                deductions=DeductionsSection.model_validate(row.deductions),
                investments=InvestmentsSection.model_validate(row.investments),
                taxes_paid=TaxesPaidSection.model_validate(row.taxes_paid),
                notes=row.notes or "",
                status=row.status,
            )

    def save(self, form: ItrForm) -> ItrForm:
        with self._session_factory() as db:
            row = db.query(ItrFormORM).filter(ItrFormORM.id == form.id).first()
            if row is None:
                row = ItrFormORM(id=form.id)
                db.add(row)
            row.owner_id = form.owner_id
            row.income = form.income.model_dump()
            row.deductions = form.deductions.model_dump()
            row.investments = form.investments.model_dump()
            row.taxes_paid = form.taxes_paid.model_dump()
            row.notes = form.notes
            row.status = form.status
            db.commit()
        return form


__all__ = [
    "DocumentRepository",
    "InMemoryDocumentRepository",
    "InMemoryItrFormRepository",
    "ItrFormRepository",
    "SqlDocumentRepository",
    "SqlItrFormRepository",
]
