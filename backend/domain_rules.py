from __future__ import annotations

from typing import Any, Dict, Literal

from pydantic import BaseModel, Field

DomainLiteral = Literal["reconciliation"]
Severity = Literal["low", "medium", "high", "critical"]


class DomainFinding(BaseModel):
    """A filer-level issue spanning one or more documents."""

    id: str
    owner_id: str
    domain: DomainLiteral
    severity: Severity
    code: str
    message: str
    metadata: Dict[str, Any] = Field(default_factory=dict)


def make_finding_id(domain: str, code: str, idx: int) -> str:
    return f"f-{domain}-{code}-{idx}"


__all__ = ["DomainFinding", "DomainLiteral", "Severity", "make_finding_id"]
