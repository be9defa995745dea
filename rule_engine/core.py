"""Deterministic rule engine for filer forms and document fields.

A rule is a mapping with an ``id``, a ``condition`` and display metadata. The
condition is a Python boolean expression over dotted operand paths such as
``deductions.section_80c > limits.section_80c``; paths are resolved against the
document merged over the tax-year context.
"""

from __future__ import annotations

import logging
import re
import uuid
from typing import Any, Dict, Iterable, List, Mapping, Optional

logger = logging.getLogger(__name__)

RULE_SOURCE = "RULE_ENGINE"


def get_path(obj: Mapping[str, Any] | None, path: str, default: Any = None) -> Any:
    """Resolve dotted path lookups on nested dictionaries."""
    current: Any = obj
    for key in path.split("."):
        if not isinstance(current, Mapping) or key not in current:
            return default
        current = current[key]
    return current


def known(value: Any) -> bool:
    """True when a rule operand is present and numeric."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


_OPERAND_RE = re.compile(r"\b([A-Za-z_][\w\.]*)\b")
_HELPERS = {"abs": abs, "min": min, "max": max, "known": known}
_KEYWORDS = {"and", "or", "not", "is", "in", "True", "False", "None"}


def build_eval_expr(condition: str) -> str:
    """Rewrite dotted operands as ``get(env, "a.b")`` lookups; names and keywords stay."""

    def replacer(match: re.Match[str]) -> str:
        token = match.group(1)
        if token in _KEYWORDS or token in _HELPERS or "." not in token:
            return token
        return f'get(env, "{token}")'

    return _OPERAND_RE.sub(replacer, condition)


def evaluate_condition(condition: str, env: Mapping[str, Any]) -> bool:
    """Evaluate a rule condition against the provided environment.

    Missing operands resolve to None; a comparison against None fails and the
    condition is treated as not triggered.
    """
    scope = dict(_HELPERS)
    scope.update({"__builtins__": {}, "get": get_path, "env": env, "True": True, "False": False, "None": None})
    try:
        return bool(eval(build_eval_expr(condition), scope))
    except Exception as exc:
        logger.debug("Condition %r not evaluated: %s", condition, exc)
        return False


def _rule_applies(rule: Mapping[str, Any], doc_type: Any) -> bool:
    scope = rule.get("doc_type")
    if scope in (None, "*"):
        return True
    if isinstance(scope, (list, tuple)):
        return doc_type in scope
    return scope == doc_type


def _finding(rule: Mapping[str, Any], doc_id: Optional[str]) -> Dict[str, Any]:
    return {
        "finding_id": str(uuid.uuid4()),
        "doc_id": doc_id,
        "source": RULE_SOURCE,
        "code": rule.get("id"),
        "field": rule.get("field"),
        "severity": rule.get("severity", "medium"),
        "message": rule.get("message", ""),
        "tags": list(rule.get("tags") or []),
    }


def apply_rules(
    document: Optional[Dict[str, Any]],
    rules: Iterable[Mapping[str, Any]],
    context: Optional[Dict[str, Any]] = None,
) -> List[Dict[str, Any]]:
    """Return one finding per rule whose scope matches and whose condition holds."""
    document = document or {}
    env: Dict[str, Any] = {**(context or {}), **document}
    doc_type = document.get("doc_type")

    return [
        _finding(rule, document.get("doc_id"))
        for rule in rules
        if isinstance(rule, Mapping)
        and rule.get("condition")
        and _rule_applies(rule, doc_type)
        and evaluate_condition(rule["condition"], env)
    ]
