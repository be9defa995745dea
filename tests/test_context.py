import pytest

from rule_engine.context import get_context_for_year, load_tax_year_config


def test_get_context_for_year_known_year():
    ctx = get_context_for_year(2024)
    assert "limits" in ctx and "rates" in ctx
    assert ctx["limits"]["section_80c"] == 150000
    assert ctx["limits"]["section_80d"] > 0
    rate = ctx["rates"]["flat_estimate_rate"]
    assert 0 < rate < 1


def test_get_context_for_year_unknown_year_raises():
    with pytest.raises(ValueError) as excinfo:
        get_context_for_year(1999)
    assert "1999" in str(excinfo.value)


def test_load_tax_year_config_caches():
    first = load_tax_year_config()
    second = load_tax_year_config()
    assert first is second
    assert {2023, 2024, 2025} <= set(first)
