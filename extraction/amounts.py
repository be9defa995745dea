from __future__ import annotations

import logging
import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

logger = logging.getLogger(__name__)

_NOISE_RE = re.compile(r"[,\s₹$€£]")
_AMOUNT_RE = re.compile(r"-?\d+(?:\.\d{1,2})?")


def round_half_up(value: Any) -> int:
    """Round to the nearest integer, halves away from zero (0.5 -> 1, -0.5 -> -1)."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_amount(text: Optional[str]) -> Optional[int]:
    """Pull the first monetary amount out of free text as a whole number of rupees.

    Thousands separators (including the Indian 1,50,000 grouping), whitespace and
    currency glyphs are removed before matching, so "₹ 1,50,000.00" gives 150000.
    Returns None when no amount is present.
    """
    if text is None:
        return None
    cleaned = _NOISE_RE.sub("", str(text))
    match = _AMOUNT_RE.search(cleaned)
    if not match:
        return None
    try:
        return round_half_up(match.group(0))
    except InvalidOperation:
        return None


def safe_float(val: Any, default: float = 0.0) -> float:
    """Parse a float safely, stripping separators and currency glyphs."""
    if val is None or isinstance(val, bool):
        return float(default)
    try:
        if isinstance(val, str):
            cleaned = _NOISE_RE.sub("", val)
            if cleaned.startswith("(") and cleaned.endswith(")"):
                cleaned = f"-{cleaned[1:-1].strip()}"
            if not cleaned:
                return float(default)
            val = cleaned
        parsed = float(val)
    except (TypeError, ValueError):
        logger.warning("Failed to parse numeric value %r; defaulting to %s", val, default)
        return float(default)
    if not math.isfinite(parsed):
        return float(default)
    return parsed


def coerce_number(value: Any) -> Any:
    """Return value as int/float when it reads as a finite number, else unchanged."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value
    if not isinstance(value, str):
        return value
    cleaned = _NOISE_RE.sub("", value)
    if not cleaned or not re.fullmatch(r"-?\d+(?:\.\d+)?", cleaned):
        return value
    number = float(cleaned)
    if not math.isfinite(number):
        return value
    return int(number) if number.is_integer() else number


__all__ = ["coerce_number", "parse_amount", "round_half_up", "safe_float"]
