# =============================================================================
# utils/money.py
# =============================================================================
# PURPOSE:
#   The only place where money is parsed and rounded.
#
# WHY DECIMAL AND NOT FLOAT?
#   Floats cannot represent most cent values exactly:
#       0.1 + 0.2 == 0.30000000000000004
#   The allocation engine adds and subtracts amounts over several rounds.
#   With floats those tiny errors pile up and the allocations stop summing
#   to the payment. Decimal keeps every cent exact.
#
# RULES:
#   - Parse raw input ONCE at the boundary (parse_amount_or_zero)
#   - Round at every point amounts are combined (round_amount)
#   - Convert to float only for storage and display (to_float)
# =============================================================================

import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, getcontext, localcontext

from config import MONEY_PLACES

ZERO = Decimal("0")

# Strings that mean "no value" in exported spreadsheets
_EMPTY_MARKERS = ("", "nan", "none", "null", "n/a", "-", "<na>")


def parse_amount_or_zero(value):
    """
    Convert a raw amount to a non-negative Decimal.

    PARAMETERS:
        value: Anything - str, int, float, Decimal, None, numpy scalar...

    RETURNS:
        Decimal: The amount, or Decimal("0") if it can't be used

    WHAT COUNTS AS ZERO:
        - None, empty strings, "N/A", "nan", "-"
        - Text that isn't a number ("abc")
        - NaN and infinity
        - Negative amounts
        - Booleans (True is not an amount)
        - Amounts too large to round to cents exactly (1e30)

    EXAMPLE:
        parse_amount_or_zero("1,250.50")  → Decimal("1250.50")
        parse_amount_or_zero(None)        → Decimal("0")
        parse_amount_or_zero(-5)          → Decimal("0")

    This function never raises. Dirty upstream data degrades to zero
    instead of failing a whole payment.
    """
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            return ZERO
        # str() first so 0.1 becomes Decimal("0.1") and not 0.1000000000000000055...
        amount = Decimal(str(value))
    else:
        # Numpy scalars expose .item() to get the plain Python value
        if hasattr(value, "item") and not isinstance(value, str):
            try:
                return parse_amount_or_zero(value.item())
            except (ValueError, TypeError):
                return ZERO

        cleaned = str(value).replace(",", "").strip()
        if cleaned.lower() in _EMPTY_MARKERS:
            return ZERO
        try:
            amount = Decimal(cleaned)
        except (InvalidOperation, ValueError):
            return ZERO

    if not amount.is_finite() or amount < 0:
        return ZERO
    if amount.adjusted() >= getcontext().prec - MONEY_PLACES:
        return ZERO
    return amount


def round_amount(value, places=MONEY_PLACES):
    """
    Round an amount to a fixed number of decimal places (half up).

    EXAMPLE:
        round_amount(Decimal("10.005"))  → Decimal("10.01")
        round_amount(33.333333)          → Decimal("33.33")
    """
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    quantum = Decimal(1).scaleb(-places)
    # Sums of large amounts can need more digits than the default context
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + places + 2)
        return value.quantize(quantum, rounding=ROUND_HALF_UP)


def to_float(amount):
    """Convert a Decimal amount to a float for SQLite / pandas."""
    return float(round_amount(amount))


def format_amount(amount, currency=None):
    """
    Format an amount for display.

    EXAMPLE:
        format_amount(Decimal("1234.5"), "RMB")  → "1,234.50 RMB"
    """
    text = f"{round_amount(parse_amount_or_zero(amount)):,.2f}"
    if currency:
        return f"{text} {currency}"
    return text
