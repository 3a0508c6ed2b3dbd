"""
services/money.py — Shared numeric helpers for money and points.

All arithmetic in the services goes through Decimal. Floats handed in by a
Python caller are converted via repr() so 0.1 becomes Decimal("0.1"), not the
binary approximation.

Rounding rule for settlement amounts: one decimal place, halves toward
positive infinity (the Math.round(x * 10) / 10 behaviour the stored nets were
produced with):
    2.25 → 2.3      -2.25 → -2.2      -2.26 → -2.3
"""

from __future__ import annotations

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal

ONE_DECIMAL = Decimal("0.1")
CENT = Decimal("0.01")
_HALF = Decimal("0.5")
_TEN = Decimal("10")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def round_dollars_1(value: Decimal | int | float | str) -> Decimal:
    """Rounds to one decimal place, halves toward +infinity."""
    scaled = to_decimal(value) * _TEN + _HALF
    tenths = scaled.to_integral_value(rounding=ROUND_FLOOR)
    return (tenths / _TEN).quantize(ONE_DECIMAL)


def to_dimes(value: Decimal | int | float | str) -> int:
    """Integer number of tenths, for exact comparisons of rounded amounts."""
    return int(round_dollars_1(value) * _TEN)


def points_for_amount(amount: Decimal | int | float | str, rate: Decimal | int | float | str) -> int:
    """
    Whole points bought for `amount` at `rate` (cash value of one point).

    Always floors: a buy-in of 10.05 at 0.10 per point is 100 points, and the
    remaining 0.05 is not credited as a fractional point.
    """
    quotient = to_decimal(amount) / to_decimal(rate)
    return int(quotient.to_integral_value(rounding=ROUND_FLOOR))


def format_currency(value: Decimal | int | float | str) -> str:
    amount = to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    if amount < 0:
        return f"-${-amount}"
    return f"${amount}"
