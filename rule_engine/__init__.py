"""ITR filing rule engine package."""

from .context import get_context_for_year, load_tax_year_config
from .core import apply_rules, build_eval_expr, evaluate_condition, get_path, known
from .loader import load_rule_set, reload_caches

__all__ = [
    "apply_rules",
    "build_eval_expr",
    "evaluate_condition",
    "get_context_for_year",
    "get_path",
    "known",
    "load_rule_set",
    "load_tax_year_config",
    "reload_caches",
]
