"""Manual field corrections: validation and merge into a stored extraction."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from backend.errors import CorrectionRejected
from extraction.amounts import coerce_number
from extraction.models import (
    SOURCE_MANUAL,
    DocumentType,
    ExtractedField,
    ExtractionResult,
    Quality,
    canonical_name,
    derive_summary,
    field_key,
)
from rule_engine import apply_rules, load_rule_set

logger = logging.getLogger(__name__)

UNABLE_TO_EXTRACT_RE = re.compile(r"unable to extract", re.IGNORECASE)


@dataclass(frozen=True)
class ManualFieldDef:
    label: str
    name: str
    kind: str = "number"
    required: bool = False


def manual_field_defs(doc_type: Optional[DocumentType], known_fields: Iterable[str] = ()) -> List[ManualFieldDef]:
    """Fields a filer can enter by hand for a document type.

    ``known_fields`` are names already extracted from the filer's other
    documents; identity fields known elsewhere are not asked for again.
    """
    known = {canonical_name(n) for n in known_fields}
    defs: List[ManualFieldDef] = []
    if doc_type == DocumentType.FORM16:
        defs += [
            ManualFieldDef("PAN", "PAN", "text", True),
            ManualFieldDef("Employer", "Employer", "text", True),
            ManualFieldDef("Gross Salary", "Salary", "number", True),
            ManualFieldDef("TDS Deducted", "TDS"),
            ManualFieldDef("Deductions (80C/80D etc)", "Deductions"),
            ManualFieldDef("Taxable Income", "Taxable Income"),
        ]
    elif doc_type == DocumentType.ANNUAL_TAX_STATEMENT:
        if "pan" not in known:
            defs.append(ManualFieldDef("PAN", "PAN", "text", True))
        defs += [ManualFieldDef("TDS", "TDS"), ManualFieldDef("Taxable Income", "Taxable Income")]
    elif doc_type == DocumentType.SALARY_SLIP:
        if "pan" not in known:
            defs.append(ManualFieldDef("PAN", "PAN", "text"))
        if "employer" not in known:
            defs.append(ManualFieldDef("Employer", "Employer", "text"))
        defs += [
            ManualFieldDef("Basic Salary", "Basic Salary"),
            ManualFieldDef("HRA", "HRA"),
            ManualFieldDef("Conveyance Allowance", "Conveyance Allowance"),
            ManualFieldDef("Other Allowances", "Other Allowances"),
            ManualFieldDef("Gross Salary", "Salary", "number", True),
            ManualFieldDef("Deductions", "Deductions"),
            ManualFieldDef("Net Salary", "Net Salary"),
        ]
    elif doc_type == DocumentType.BANK_STATEMENT:
        defs.append(ManualFieldDef("Interest Income", "Interest Income", "number", True))
    elif doc_type == DocumentType.INVESTMENT_PROOF:
        defs.append(ManualFieldDef("Amount Invested (80C)", "Eligible 80C", "number", True))
    elif doc_type == DocumentType.RENT_RECEIPT:
        defs.append(ManualFieldDef("Total Rent Paid", "Deductions", "number", True))
    elif doc_type == DocumentType.LOAN_STATEMENT:
        defs.append(ManualFieldDef("Interest Paid", "Interest Paid", "number", True))
    elif doc_type == DocumentType.MEDICAL_BILL:
        defs.append(ManualFieldDef("Medical Expense", "Medical Expense", "number", True))
    elif doc_type == DocumentType.CAPITAL_GAINS_REPORT:
        defs += [ManualFieldDef("Capital Gains", "Capital Gains"), ManualFieldDef("Taxable Income", "Taxable Income")]
    elif doc_type == DocumentType.BUSINESS_INCOME_DOCUMENT:
        defs += [
            ManualFieldDef("Business Income", "Business Income", "number", True),
            ManualFieldDef("Expenses", "Deductions"),
        ]
    return defs


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _correction_pairs(corrections: Iterable[Any]) -> List[tuple]:
    pairs = []
    for c in corrections:
        if isinstance(c, Mapping):
            pairs.append((str(c.get("name", "")), c.get("value")))
        else:
            pairs.append((c.name, c.value))
    return pairs


def merge_corrections(result: ExtractionResult, corrections: Iterable[Any]) -> ExtractionResult:
    """Return a new result with user overrides applied and the summary re-derived.

    Each correction replaces every field sharing its canonical name (the first
    keeps its position, the rest are dropped) or is appended. Blank values are
    skipped. Applying the same corrections twice gives the same result.
    """
    fields: List[ExtractedField] = [f.model_copy() for f in result.fields]
    for name, value in _correction_pairs(corrections):
        if not name.strip() or _is_blank(value):
            continue
        value = coerce_number(value.strip() if isinstance(value, str) else value)
        manual = ExtractedField(name=name.strip(), value=value, confidence=1.0, source=SOURCE_MANUAL)
        key = canonical_name(name)
        positions = [i for i, f in enumerate(fields) if canonical_name(f.name) == key]
        if positions:
            fields[positions[0]] = manual
            for i in reversed(positions[1:]):
                del fields[i]
        else:
            fields.append(manual)

    messages = [m for m in result.messages if not UNABLE_TO_EXTRACT_RE.search(m)]
    return ExtractionResult(
        declared_type=result.declared_type,
        quality=Quality.GOOD,
        fields=fields,
        summary=derive_summary(fields),
        messages=messages,
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_corrections(
    doc_type: Optional[DocumentType],
    existing_fields: Iterable[ExtractedField],
    corrections: Iterable[Any],
    known_fields: Iterable[str] = (),
    context: Optional[Dict[str, Any]] = None,
) -> None:
    """Raise CorrectionRejected with a per-field error map if any correction is invalid.

    Every numeric value must be finite and not negative, whether or not its
    name is one of the type's manual fields.
    """
    pairs = _correction_pairs(corrections)
    errors: Dict[str, str] = {}
    defs = manual_field_defs(doc_type, known_fields)
    labels = {canonical_name(d.name): d.name for d in defs}

    existing = ExtractionResult(fields=list(existing_fields)).field_map()
    merged: Dict[str, Any] = {key: f.value for key, f in existing.items()}
    corrected: Set[str] = set()
    for name, value in pairs:
        if not name.strip():
            errors["name"] = "Field name is required"
            continue
        if _is_blank(value):
            continue
        key = canonical_name(name)
        number = coerce_number(value.strip() if isinstance(value, str) else value)
        if _is_number(number) and (not math.isfinite(number) or number < 0):
            errors[labels.get(key, name.strip())] = "Enter a valid number"
            continue
        merged[key] = number
        corrected.add(key)

    submitted = {canonical_name(n): v for n, v in pairs if n.strip()}
    for d in defs:
        key = canonical_name(d.name)
        if d.name in errors:
            continue
        if d.required and _is_blank(merged.get(key)):
            errors[d.name] = "Required"
            continue
        if d.kind == "number" and key in submitted and not _is_blank(submitted[key]):
            if not _is_number(coerce_number(submitted[key])):
                errors[d.name] = "Enter a valid number"

    rules = [
        rule
        for rule in load_rule_set("corrections")
        if any(canonical_name(i) in corrected for i in rule.get("inputs") or [rule.get("field", "")])
    ]
    document = {
        "doc_type": doc_type.value if doc_type else None,
        "fields": {field_key(k): v for k, v in merged.items()},
    }
    for finding in apply_rules(document, rules, context or {}):
        errors.setdefault(finding["field"], finding["message"])

    if errors:
        logger.info("Rejected corrections for %s: %s", doc_type.value if doc_type else "unknown", sorted(errors))
        raise CorrectionRejected(errors)


__all__ = ["ManualFieldDef", "manual_field_defs", "merge_corrections", "validate_corrections"]
