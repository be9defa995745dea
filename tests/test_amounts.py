from extraction.amounts import coerce_number, parse_amount, round_half_up, safe_float


def test_parse_amount_indian_grouping_with_rupee_sign():
    assert parse_amount("₹1,50,000.00") == 150000


def test_parse_amount_not_found():
    assert parse_amount("no digits here") is None
    assert parse_amount("") is None
    assert parse_amount(None) is None


def test_parse_amount_keeps_sign():
    assert parse_amount("-2,500") == -2500


def test_parse_amount_strips_spaces_and_rounds_half_up():
    assert parse_amount("Total: 1 20 000") == 120000
    assert parse_amount("Rs. 12,345.50") == 12346
    assert parse_amount("$ 99.49") == 99


def test_round_half_up_rounds_halves_away_from_zero():
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -3
    assert round_half_up(104999.4) == 104999


def test_safe_float_lenient_parsing():
    assert safe_float("1,234.5") == 1234.5
    assert safe_float("(500)") == -500.0
    assert safe_float("abc", 7) == 7.0
    assert safe_float(None) == 0.0
    assert safe_float(float("nan"), 1.0) == 1.0


def test_coerce_number():
    assert coerce_number("1,50,000") == 150000
    assert isinstance(coerce_number("1,50,000"), int)
    assert coerce_number("12.5") == 12.5
    assert coerce_number("ABCDE1234F") == "ABCDE1234F"
    assert coerce_number(42) == 42
