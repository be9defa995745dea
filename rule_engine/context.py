"""Tax-year context: statutory deduction limits and the placeholder estimate rate.

Years are keyed by the year the financial year starts in, so 2024 is FY 2024-25
(AY 2025-26).
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml

CONFIG_PATH = Path(__file__).resolve().parent / "config" / "tax_years.yaml"

REQUIRED_KEYS = (("limits", "section_80c"), ("rates", "flat_estimate_rate"))


def _check_year(year: int, entry: Any) -> Dict[str, Any]:
    if not isinstance(entry, dict):
        raise ValueError(f"Config for tax year {year} must be a mapping.")
    missing = [f"{section}.{key}" for section, key in REQUIRED_KEYS if key not in (entry.get(section) or {})]
    if missing:
        raise ValueError(f"Config for tax year {year} missing required keys: {', '.join(missing)}")
    return entry


@lru_cache(maxsize=1)
def load_tax_year_config() -> Dict[int, Dict[str, Any]]:
    """Parse tax_years.yaml into {year: {"limits": {...}, "rates": {...}}}."""
    if not CONFIG_PATH.exists():
        raise FileNotFoundError(f"Tax year config not found at {CONFIG_PATH}")
    with CONFIG_PATH.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    config: Dict[int, Dict[str, Any]] = {}
    for key, entry in raw.items():
        try:
            year = int(key)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid tax year key: {key}") from exc
        config[year] = _check_year(year, entry)
    return config


def get_context_for_year(tax_year: int) -> Dict[str, Any]:
    """Rule context for one tax year; unknown years raise ValueError."""
    config = load_tax_year_config()
    if tax_year not in config:
        supported = ", ".join(str(y) for y in sorted(config))
        raise ValueError(f"Unsupported tax year: {tax_year} (configured: {supported})")
    return config[tax_year]
