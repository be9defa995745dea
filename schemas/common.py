"""Helpers shared by the per-document-type export schemas."""

from __future__ import annotations

from typing import Any, Dict, Optional

from extraction.models import ExtractionResult, FieldValue, as_amount


def field_value(result: ExtractionResult, name: str) -> Optional[FieldValue]:
    return result.get_value(name)


def field_amount(result: ExtractionResult, name: str) -> Optional[float]:
    return as_amount(result.get_value(name))


def compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys whose value is None, recursing into nested dicts."""
    out: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            value = compact(value)
        if value is None:
            continue
        out[key] = value
    return out
