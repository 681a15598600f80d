# =============================================================================
# test_money.py - Amount parsing and rounding
# =============================================================================
# Run: pytest test_money.py
# =============================================================================

from decimal import Decimal

import pytest

from utils.money import format_amount, parse_amount_or_zero, round_amount, to_float


@pytest.mark.parametrize("raw, expected", [
    ("100", Decimal("100")),
    ("  42.50 ", Decimal("42.50")),
    ("1,250.50", Decimal("1250.50")),
    (75, Decimal("75")),
    (0.1, Decimal("0.1")),
    (Decimal("9.99"), Decimal("9.99")),
])
def test_parse_amount_accepts_numbers_and_numeric_text(raw, expected):
    assert parse_amount_or_zero(raw) == expected


@pytest.mark.parametrize("raw", [
    None, "", "   ", "abc", "N/A", "nan", "-", "12abc",
    -5, "-10.00", float("nan"), float("inf"), True, {"amount": 5},
    "1e30", 1e27, Decimal("1e26"),
])
def test_parse_amount_normalizes_bad_values_to_zero(raw):
    assert parse_amount_or_zero(raw) == Decimal("0")


def test_parse_amount_handles_numpy_scalars():
    numpy = pytest.importorskip("numpy")
    assert parse_amount_or_zero(numpy.float64(12.5)) == Decimal("12.5")
    assert parse_amount_or_zero(numpy.int64(7)) == Decimal("7")
    assert parse_amount_or_zero(numpy.float64("nan")) == Decimal("0")


def test_round_amount_rounds_half_up_to_cents():
    assert round_amount(Decimal("10.005")) == Decimal("10.01")
    assert round_amount(Decimal("10.004")) == Decimal("10.00")
    assert round_amount(33.333333) == Decimal("33.33")
    assert str(round_amount(Decimal("5"))) == "5.00"


def test_round_amount_other_places():
    assert round_amount(Decimal("0.33335"), 4) == Decimal("0.3334")


def test_to_float_and_format_amount():
    assert to_float(Decimal("12.345")) == 12.35
    assert format_amount(Decimal("1234.5"), "RMB") == "1,234.50 RMB"
    assert format_amount("0") == "0.00"


def test_parse_amount_keeps_large_amounts_that_fit():
    assert parse_amount_or_zero("9e25") == Decimal("9e25")


def test_round_amount_of_values_beyond_default_precision():
    assert round_amount(Decimal("1.8e26")) == Decimal("180000000000000000000000000.00")
    assert round_amount(Decimal("1e30")).as_tuple().exponent == -2
