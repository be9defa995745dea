from __future__ import annotations

from typing import Any, Dict, List, Optional

from backend.filing_models import ItrForm, ItrValidation, ValidationIssue
from backend.key_summary import SECTION_80C_LIMIT
from rule_engine import apply_rules, load_rule_set


def itr_rule_document(form: ItrForm) -> Dict[str, Any]:
    """Flatten a form into the snake_case operand tree the ITR rules read."""
    total_income = sum(form.income.model_dump().values())
    total_deductions = sum(form.deductions.model_dump().values())
    return {
        "doc_type": "itr_form",
        "doc_id": form.id,
        "income": form.income.model_dump(),
        "deductions": form.deductions.model_dump(),
        "investments": form.investments.model_dump(),
        "taxes_paid": form.taxes_paid.model_dump(),
        "totals": {"total_income": total_income, "total_deductions": total_deductions},
    }


def validate_itr_form(form: ItrForm, context: Optional[Dict[str, Any]] = None) -> ItrValidation:
    """Run limit and consistency checks; issues are advisory and never block saving."""
    env = {"limits": {"section_80c": SECTION_80C_LIMIT}}
    if context:
        env.update(context)
    document = itr_rule_document(form)
    issues: List[ValidationIssue] = [
        ValidationIssue(field=f["field"], code=f["code"], message=f["message"], severity=f["severity"])
        for f in apply_rules(document, load_rule_set("itr"), env)
    ]
    return ItrValidation(
        total_income=document["totals"]["total_income"],
        total_deductions=document["totals"]["total_deductions"],
        issues=issues,
    )


__all__ = ["itr_rule_document", "validate_itr_form"]
