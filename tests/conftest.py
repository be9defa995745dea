import os

os.environ.setdefault("STORAGE_BACKEND", "memory")

import pytest  # noqa: E402

from backend.document_store import InMemoryDocumentRepository, InMemoryItrFormRepository  # noqa: E402
from backend.filing_models import Document  # noqa: E402
from backend.filing_service import FilingService  # noqa: E402
from extraction.models import ExtractedField, ExtractionResult, derive_summary  # noqa: E402
from rule_engine import get_context_for_year  # noqa: E402

FORM16_TEXT = """FORM NO. 16
Name of Employer: Acme Technologies Pvt Ltd
PAN of Employee: ABCDE1234F
Gross Salary: 12,00,000
Deductions under Chapter VI-A (80C): 1,50,000
Total Taxable Income: 10,50,000
Tax Deducted at Source (TDS): 95,000
"""

SALARY_SLIP_TEXT = """Salary Slip for March
Employee PAN: ABCDE1234F
Gross Salary: 10,30,000
TDS: 8,000
"""

STATEMENT_TEXT = """Form 26AS
PAN: ABCDE1234F
Total Income reported: 11,80,000
TDS deposited: 92,000
Taxable income: 10,40,000
"""


@pytest.fixture
def make_result():
    """Build an ExtractionResult from a {name: value} mapping of rule-extracted fields."""

    def _make(doc_type, values=None, summary=None, **kwargs):
        fields = [
            ExtractedField(name=name, value=value, confidence=0.8, source="rule:line")
            for name, value in (values or {}).items()
        ]
        result = ExtractionResult(declared_type=doc_type, fields=fields, **kwargs)
        result.summary = summary if summary is not None else derive_summary(fields)
        return result

    return _make


@pytest.fixture
def make_doc(make_result):
    """Build an extracted Document for an owner."""

    def _make(doc_type, values=None, owner_id="filer-1", summary=None):
        return Document(
            owner_id=owner_id,
            declared_type=doc_type,
            mime_type="text/plain",
            byte_size=100,
            original_file_name="doc.txt",
            status="extracted",
            extracted=make_result(doc_type, values, summary=summary),
        )

    return _make


@pytest.fixture
def tax_context():
    return get_context_for_year(2024)


@pytest.fixture
def service(tax_context):
    return FilingService(
        InMemoryDocumentRepository(),
        InMemoryItrFormRepository(),
        pdf_text=lambda content: "",
        tax_context=tax_context,
    )
