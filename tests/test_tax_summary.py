from backend.tax_summary import compute_filer_aggregate, missing_deduction_proofs, recommend_itr_form
from extraction.models import DocumentType


def test_aggregate_form16_investment_and_interest(make_doc, tax_context):
    docs = [
        make_doc(
            DocumentType.FORM16,
            {"Salary": 1200000, "Deductions": 150000, "Taxable Income": 1050000, "TDS": 95000},
        ),
        make_doc(DocumentType.INVESTMENT_PROOF, {"Eligible 80C": 50000}),
        make_doc(DocumentType.BANK_STATEMENT, {"Interest Income": 4000}),
    ]
    agg = compute_filer_aggregate(docs, tax_context)

    assert agg.document_count == 3
    assert agg.total_salary == 1200000
    assert agg.taxable_income == 1050000
    assert agg.total_deductions == 200000
    assert agg.total_tds == 95000
    assert agg.estimated_tax == 105000
    assert agg.tax_payable == 10000
    assert agg.refund == 0
    assert agg.total_investments == 50000
    assert agg.total_interest == 4000
    assert agg.section_80c_headroom == 0
    assert agg.tax_rate == 0.10


def test_aggregate_refund_when_tds_exceeds_estimate(make_doc):
    docs = [make_doc(DocumentType.FORM16, {"Salary": 500000, "Taxable Income": 400000, "TDS": 50000})]
    agg = compute_filer_aggregate(docs)
    assert agg.estimated_tax == 40000
    assert agg.refund == 10000
    assert agg.tax_payable == 0
    assert agg.section_80c_headroom == 150000


def test_aggregate_ignores_unprocessed_documents(make_doc):
    done = make_doc(DocumentType.FORM16, {"Salary": 500000, "TDS": 1000})
    pending = done.model_copy(update={"status": "processing", "extracted": None})
    failed = done.model_copy(update={"status": "error", "extracted": None, "error": "Processing failed"})

    agg = compute_filer_aggregate([done, pending, failed])
    assert agg.document_count == 1
    assert agg.total_salary == 500000
    assert agg.total_tds == 1000


def test_aggregate_empty():
    agg = compute_filer_aggregate([])
    assert agg.document_count == 0
    assert agg.estimated_tax == 0
    assert agg.refund == 0
    assert agg.tax_payable == 0


def test_aggregate_text_tds_counts_as_zero(make_doc):
    docs = [make_doc(DocumentType.FORM16, {"Salary": 100000, "TDS": "n/a"})]
    assert compute_filer_aggregate(docs).total_tds == 0


def test_recommendation_follows_extracted_document_types(make_doc):
    form16 = make_doc(DocumentType.FORM16, {"Salary": 800000})
    bank = make_doc(DocumentType.BANK_STATEMENT, {"Interest Income": 4000})
    agg = compute_filer_aggregate([form16, bank])
    assert agg.recommended_form == "ITR-1 (Sahaj)"
    assert agg.recommendation_reason == "Income from salary and/or interest only."

    rent = make_doc(DocumentType.RENT_RECEIPT, {"Deductions": 120000})
    assert compute_filer_aggregate([form16, rent]).recommended_form == "ITR-2"

    gains = make_doc(DocumentType.CAPITAL_GAINS_REPORT, {"Capital Gains": 50000})
    assert compute_filer_aggregate([form16, gains]).recommendation_reason == "Capital gains income present."

    business = make_doc(DocumentType.BUSINESS_INCOME_DOCUMENT, {"Business Income": 900000})
    agg = compute_filer_aggregate([form16, gains, business])
    assert agg.recommended_form == "ITR-3"
    assert agg.recommendation_reason == "Income from business/profession."

    agg = compute_filer_aggregate([bank])
    assert agg.recommended_form == "ITR-2"
    assert agg.recommendation_reason == "Multiple income sources detected."


def test_recommendation_ignores_unprocessed_documents(make_doc):
    form16 = make_doc(DocumentType.FORM16, {"Salary": 800000})
    business = make_doc(DocumentType.BUSINESS_INCOME_DOCUMENT, {"Business Income": 900000})
    pending = business.model_copy(update={"status": "processing", "extracted": None})
    assert compute_filer_aggregate([form16, pending]).recommended_form == "ITR-1 (Sahaj)"
    assert compute_filer_aggregate([]).recommended_form == "ITR-1 (Sahaj)"


def test_missing_deduction_proofs(make_doc):
    assert recommend_itr_form(set())[0] == "ITR-1 (Sahaj)"
    docs = [make_doc(DocumentType.FORM16, {"Salary": 800000})]
    assert compute_filer_aggregate(docs).missing_deduction_proofs == [
        "Investment Proof",
        "Medical Bill",
        "Rent Receipt",
        "Loan Statement",
    ]

    # an uploaded proof counts even before extraction finishes
    proof = make_doc(DocumentType.INVESTMENT_PROOF, {"Eligible 80C": 50000})
    medical = make_doc(DocumentType.MEDICAL_BILL).model_copy(update={"status": "processing", "extracted": None})
    assert missing_deduction_proofs(docs + [proof, medical]) == ["Rent Receipt", "Loan Statement"]
