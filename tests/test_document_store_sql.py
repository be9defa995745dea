import pytest

from backend.db import build_engine, build_session_factory, init_db
from backend.document_store import SqlDocumentRepository, SqlItrFormRepository
from backend.filing_models import Document, seed_itr_form
from extraction.models import DocumentType, ExtractedField, ExtractionResult, Quality


@pytest.fixture
def session_factory():
    engine = build_engine("sqlite://")
    init_db(bind=engine)
    return build_session_factory(engine)


def _doc(owner="filer-1", doc_type=DocumentType.FORM16, **kwargs):
    return Document(
        owner_id=owner,
        declared_type=doc_type,
        mime_type="application/pdf",
        byte_size=3,
        original_file_name="form16.pdf",
        status="processing",
        **kwargs,
    )


def test_document_round_trip_with_extraction(session_factory):
    repo = SqlDocumentRepository(session_factory)
    doc = repo.save(_doc())
    repo.save_content(doc.id, b"pdf")
    assert repo.fetch_content(doc.id) == b"pdf"

    result = ExtractionResult(
        declared_type=DocumentType.FORM16,
        quality=Quality.LOW,
        fields=[ExtractedField(name="Salary", value=500000, confidence=0.9, source="rule:line")],
        messages=["check me"],
    )
    repo.save(doc.model_copy(update={"status": "extracted", "extracted": result}))

    stored = repo.get(doc.id)
    assert stored.status == "extracted"
    assert stored.declared_type == DocumentType.FORM16
    assert stored.extracted.quality == Quality.LOW
    assert stored.extracted.get_amount("Salary") == 500000
    assert stored.extracted.messages == ["check me"]
    # metadata saves keep the stored bytes
    assert repo.fetch_content(doc.id) == b"pdf"


def test_list_for_owner_keeps_upload_order(session_factory):
    repo = SqlDocumentRepository(session_factory)
    first = repo.save(_doc())
    second = repo.save(_doc(doc_type=DocumentType.SALARY_SLIP))
    repo.save(_doc(owner="other"))
    repo.save(first.model_copy(update={"status": "error", "error": "Processing failed"}))

    assert [d.id for d in repo.list_for_owner("filer-1")] == [first.id, second.id]


def test_delete(session_factory):
    repo = SqlDocumentRepository(session_factory)
    doc = repo.save(_doc())
    assert repo.delete(doc.id) is True
    assert repo.get(doc.id) is None
    assert repo.fetch_content(doc.id) is None
    assert repo.delete(doc.id) is False


def test_itr_form_round_trip(session_factory):
    repo = SqlItrFormRepository(session_factory)
    assert repo.get("itr-1") is None
    form = seed_itr_form("itr-1", "filer-1")
    repo.save(form)
    form.deductions.section_80c = 120000
    repo.save(form.model_copy(update={"status": "submitted"}))

    stored = repo.get("itr-1")
    assert stored.owner_id == "filer-1"
    assert stored.status == "submitted"
    assert stored.deductions.section_80c == 120000
    assert stored.taxes_paid.advance_tax == 10000
