from conftest import FORM16_TEXT, STATEMENT_TEXT

from backend.key_summary import build_key_summary
from extraction.heuristics import extract_heuristics
from extraction.models import DocumentType, ExtractionSummary
from schemas import build_export


def test_form16_export_shape():
    result = extract_heuristics(FORM16_TEXT, DocumentType.FORM16)
    export = build_export(result)
    assert export == {
        "document_type": "Form 16",
        "PAN": "ABCDE1234F",
        "employer_name": "Acme Technologies Pvt Ltd",
        "gross_salary": 1200000,
        "deductions": {"section_80C": 150000},
        "tds_deducted": 95000,
        "tax_payable": 105000,
    }


def test_form16_export_omits_missing_values(make_result):
    result = make_result(DocumentType.FORM16, {"Salary": 0})
    export = build_export(result)
    assert export == {"document_type": "Form 16", "gross_salary": 0}


def test_form16_export_uses_configured_rate():
    result = extract_heuristics(FORM16_TEXT, DocumentType.FORM16)
    assert build_export(result, rate=0.05)["tax_payable"] == 52500


def test_annual_statement_export():
    result = extract_heuristics(STATEMENT_TEXT, DocumentType.ANNUAL_TAX_STATEMENT)
    assert build_export(result) == {
        "document_type": "Form 26AS/AIS",
        "pan": "ABCDE1234F",
        "tax_deducted_at_source": 92000,
        "total_tax_paid": 92000,
    }


def test_salary_slip_net_salary(make_result):
    result = make_result(DocumentType.SALARY_SLIP, {"Salary": 80000, "Deductions": 12000})
    assert build_export(result) == {"document_type": "Salary Slip", "net_salary": 68000}

    result = make_result(DocumentType.SALARY_SLIP, {"Salary": 80000})
    assert build_export(result) == {"document_type": "Salary Slip"}


def test_investment_proof_export(make_result):
    result = make_result(DocumentType.INVESTMENT_PROOF, {"Eligible 80C": 50000})
    assert build_export(result) == {
        "document_type": "Investment Proof",
        "investment_type": "ELSS",
        "amount_invested": 50000,
        "section": "80C",
    }
    assert build_export(make_result(DocumentType.INVESTMENT_PROOF)) == {"document_type": "Investment Proof"}


def test_receipt_exports(make_result):
    assert build_export(make_result(DocumentType.RENT_RECEIPT, {"Deductions": 240000})) == {
        "document_type": "Rent Receipt",
        "total_rent_paid": 240000,
    }
    loan = make_result(DocumentType.LOAN_STATEMENT, {"Interest Paid": 180000, "Deductions": 1})
    assert build_export(loan)["interest_paid"] == 180000
    medical = make_result(DocumentType.MEDICAL_BILL, {"Deductions": 12500})
    assert build_export(medical)["amount_paid"] == 12500


def test_capital_gains_and_business_exports(make_result):
    gains = make_result(
        DocumentType.CAPITAL_GAINS_REPORT,
        summary=ExtractionSummary(income=500000, deductions=0, taxable_income=380000),
    )
    assert build_export(gains) == {"document_type": "Capital Gains Report", "capital_gains": 120000}
    assert build_export(make_result(DocumentType.CAPITAL_GAINS_REPORT)) == {"document_type": "Capital Gains Report"}

    business = make_result(
        DocumentType.BUSINESS_INCOME_DOCUMENT,
        summary=ExtractionSummary(income=900000, deductions=300000, taxable_income=600000),
    )
    assert build_export(business) == {
        "document_type": "Business Income Document",
        "total_income": 900000,
        "total_expenses": 300000,
        "net_profit": 600000,
    }


def test_unknown_type_export(make_result):
    assert build_export(make_result(None)) == {"document_type": None}


def test_key_summary_per_type(make_result):
    form16 = extract_heuristics(FORM16_TEXT, DocumentType.FORM16)
    assert build_key_summary(form16) == {"Salary": 1200000, "Taxable Income": 1050000, "Deductions": 150000}

    statement = extract_heuristics(STATEMENT_TEXT, DocumentType.ANNUAL_TAX_STATEMENT)
    assert build_key_summary(statement) == {"Reported Income": 1180000, "Deductions": 0, "Taxable Income": 1040000}

    proof = make_result(DocumentType.INVESTMENT_PROOF, {"Eligible 80C": 200000})
    assert build_key_summary(proof) == {"Eligible 80C (est.)": 150000}
    assert build_key_summary(proof, limit_80c=250000) == {"Eligible 80C (est.)": 200000}

    rent = make_result(DocumentType.RENT_RECEIPT, {"Deductions": 96000})
    assert build_key_summary(rent) == {"HRA Basis (est.)": 96000}

    gains = make_result(
        DocumentType.CAPITAL_GAINS_REPORT,
        summary=ExtractionSummary(income=100000, deductions=0, taxable_income=150000),
    )
    assert build_key_summary(gains) == {"Capital Gains (est.)": 0}

    other = make_result(None, {"Salary": 10})
    assert build_key_summary(other) == {"Income": 10, "Deductions": 0, "Taxable Income": 10}
