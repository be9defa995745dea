"""Loader utilities for rule YAML files."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

import yaml


RULES_DIR = Path(__file__).resolve().parent / "rules"


def _load_yaml_file(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or []


def _normalize_rules(source: Path, raw: Any) -> List[Dict[str, Any]]:
    """Normalize rule YAML payloads to a flat list of dicts."""
    if isinstance(raw, dict):
        rules = raw.get("rules") or []
    elif isinstance(raw, list):
        rules = raw
    else:
        return []

    normalized: List[Dict[str, Any]] = []
    for rule in rules:
        if not isinstance(rule, dict):
            continue
        if not rule.get("id") or not rule.get("condition"):
            raise ValueError(f"Rule in {source.name} needs both 'id' and 'condition': {rule!r}")
        rule["_source"] = source.name
        normalized.append(rule)
    return normalized


@lru_cache(maxsize=None)
def load_rule_set(name: str) -> List[Dict[str, Any]]:
    """Load rules/<name>.yaml; the result is cached, treat it as read-only."""
    path = RULES_DIR / f"{name}.yaml"
    if not path.exists():
        raise FileNotFoundError(f"Rule file not found: {path}")
    return _normalize_rules(path, _load_yaml_file(path))


def reload_caches() -> None:
    """Clear cached loaders (useful for tests)."""
    load_rule_set.cache_clear()
