import pytest

from backend.corrections import manual_field_defs, merge_corrections, validate_corrections
from backend.errors import CorrectionRejected
from extraction.models import LOW_QUALITY_MESSAGE, DocumentType, Quality


def _names(defs):
    return [d.name for d in defs]


def test_manual_field_defs_form16():
    defs = manual_field_defs(DocumentType.FORM16)
    assert _names(defs) == ["PAN", "Employer", "Salary", "TDS", "Deductions", "Taxable Income"]
    assert [d.name for d in defs if d.required] == ["PAN", "Employer", "Salary"]


def test_manual_field_defs_skip_identity_known_elsewhere():
    assert "PAN" in _names(manual_field_defs(DocumentType.ANNUAL_TAX_STATEMENT))
    assert "PAN" not in _names(manual_field_defs(DocumentType.ANNUAL_TAX_STATEMENT, known_fields=["PAN"]))

    slip = manual_field_defs(DocumentType.SALARY_SLIP, known_fields=["pan", "EMPLOYER"])
    assert "PAN" not in _names(slip)
    assert "Employer" not in _names(slip)
    assert "Basic Salary" in _names(slip)


def test_manual_field_defs_unknown_type_is_empty():
    assert manual_field_defs(None) == []


def test_merge_replaces_and_appends(make_result):
    result = make_result(
        DocumentType.FORM16,
        {"Salary": 1000000, "TDS": 50000},
        quality=Quality.LOW,
        messages=[LOW_QUALITY_MESSAGE, "Employer name looked truncated"],
    )
    merged = merge_corrections(
        result,
        [{"name": "salary", "value": "12,00,000"}, {"name": "Deductions", "value": 150000}],
    )

    assert merged is not result
    assert merged.quality == Quality.GOOD
    assert merged.messages == ["Employer name looked truncated"]
    assert [f.name for f in merged.fields] == ["salary", "TDS", "Deductions"]
    salary = merged.get_field("Salary")
    assert salary.value == 1200000
    assert salary.source == "user:manual"
    assert salary.confidence == 1.0
    assert merged.summary.income == 1200000
    assert merged.summary.deductions == 150000
    assert merged.summary.taxable_income == 1050000

    # the stored result is untouched
    assert result.get_amount("Salary") == 1000000
    assert result.quality == Quality.LOW


def test_merge_is_idempotent_and_drops_duplicates(make_result):
    result = make_result(DocumentType.FORM16, {"TDS": 1})
    result.fields.append(result.fields[0].model_copy(update={"value": 2}))
    corrections = [{"name": "TDS", "value": 90000}]

    once = merge_corrections(result, corrections)
    twice = merge_corrections(once, corrections)
    assert [f.value for f in once.fields] == [90000]
    assert once.model_dump() == twice.model_dump()


def test_merge_skips_blank_values_and_keeps_text(make_result):
    result = make_result(DocumentType.FORM16, {"Salary": 500000})
    merged = merge_corrections(
        result,
        [{"name": "Salary", "value": "   "}, {"name": "PAN", "value": " ABCDE1234F "}],
    )
    assert merged.get_amount("Salary") == 500000
    assert merged.get_value("PAN") == "ABCDE1234F"


def test_validate_requires_required_fields(make_result, tax_context):
    existing = make_result(DocumentType.FORM16, {"Salary": 900000}).fields
    with pytest.raises(CorrectionRejected) as excinfo:
        validate_corrections(DocumentType.FORM16, existing, [{"name": "PAN", "value": "ABCDE1234F"}], context=tax_context)
    assert excinfo.value.errors == {"Employer": "Required"}


def test_validate_accepts_complete_form16(make_result, tax_context):
    existing = make_result(DocumentType.FORM16, {"PAN": "ABCDE1234F", "Employer": "Acme", "Salary": 900000}).fields
    validate_corrections(DocumentType.FORM16, existing, [{"name": "TDS", "value": "45,000"}], context=tax_context)


def test_validate_rejects_bad_numbers(make_result, tax_context):
    existing = make_result(DocumentType.FORM16, {"PAN": "ABCDE1234F", "Employer": "Acme", "Salary": 900000}).fields
    with pytest.raises(CorrectionRejected) as excinfo:
        validate_corrections(
            DocumentType.FORM16,
            existing,
            [{"name": "TDS", "value": "lots"}, {"name": "Deductions", "value": -5}],
            context=tax_context,
        )
    assert excinfo.value.errors == {"TDS": "Enter a valid number", "Deductions": "Enter a valid number"}
    assert excinfo.value.status_code == 422


def test_validate_blank_name(tax_context):
    with pytest.raises(CorrectionRejected) as excinfo:
        validate_corrections(DocumentType.BANK_STATEMENT, [], [{"name": " ", "value": 1}], context=tax_context)
    assert "name" in excinfo.value.errors
    assert excinfo.value.errors["Interest Income"] == "Required"


def test_validate_cross_field_tds_over_salary(make_result, tax_context):
    existing = make_result(DocumentType.FORM16, {"PAN": "ABCDE1234F", "Employer": "Acme", "Salary": 500000}).fields
    with pytest.raises(CorrectionRejected) as excinfo:
        validate_corrections(DocumentType.FORM16, existing, [{"name": "TDS", "value": 600000}], context=tax_context)
    assert excinfo.value.errors == {"TDS": "TDS cannot exceed Salary."}


def test_validate_cross_field_rules_only_for_corrected_inputs(make_result, tax_context):
    # an extracted inconsistency the filer did not touch is not blocking
    existing = make_result(
        DocumentType.FORM16,
        {"PAN": "ABCDE1234F", "Employer": "Acme", "Salary": 500000, "TDS": 600000},
    ).fields
    validate_corrections(DocumentType.FORM16, existing, [{"name": "Employer", "value": "Acme Ltd"}], context=tax_context)


def test_validate_taxable_over_salary(make_result, tax_context):
    existing = make_result(DocumentType.SALARY_SLIP, {"Salary": 500000}).fields
    with pytest.raises(CorrectionRejected) as excinfo:
        validate_corrections(
            DocumentType.SALARY_SLIP, existing, [{"name": "Taxable Income", "value": 700000}], context=tax_context
        )
    assert excinfo.value.errors == {"Taxable Income": "Taxable Income cannot exceed Salary."}


def test_validate_80c_limit_from_tax_year(tax_context):
    with pytest.raises(CorrectionRejected) as excinfo:
        validate_corrections(
            DocumentType.INVESTMENT_PROOF, [], [{"name": "Eligible 80C", "value": 160000}], context=tax_context
        )
    assert excinfo.value.errors == {"Eligible 80C": "Eligible 80C cannot exceed the Section 80C limit of 1,50,000."}

    validate_corrections(DocumentType.INVESTMENT_PROOF, [], [{"name": "Eligible 80C", "value": 150000}], context=tax_context)


def test_validate_rejects_negative_or_nan_for_any_field_name(tax_context):
    # TDS and Salary are not manual fields of a bank statement
    with pytest.raises(CorrectionRejected) as excinfo:
        validate_corrections(
            DocumentType.BANK_STATEMENT,
            [],
            [
                {"name": "Interest Income", "value": 4000},
                {"name": "TDS", "value": -90000},
                {"name": "Salary", "value": float("nan")},
                {"name": "Bonus", "value": "-1,000"},
            ],
            context=tax_context,
        )
    assert excinfo.value.errors == {
        "TDS": "Enter a valid number",
        "Salary": "Enter a valid number",
        "Bonus": "Enter a valid number",
    }

    with pytest.raises(CorrectionRejected) as excinfo:
        validate_corrections(
            DocumentType.BANK_STATEMENT,
            [],
            [{"name": "Interest Income", "value": 4000}, {"name": "Refund", "value": float("inf")}],
            context=tax_context,
        )
    assert excinfo.value.errors == {"Refund": "Enter a valid number"}


def test_validate_accepts_non_negative_extra_fields(tax_context):
    validate_corrections(
        DocumentType.BANK_STATEMENT,
        [],
        [{"name": "Interest Income", "value": 4000}, {"name": "TDS", "value": 0}, {"name": "Branch", "value": "MG Road"}],
        context=tax_context,
    )
