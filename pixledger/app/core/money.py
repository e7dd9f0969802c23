"""
Monetary value helpers.

All balances and amounts are `Decimal` values with two decimal places.
Floats never enter the arithmetic: they are converted through `str()` first.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

MoneyInput = Union[Decimal, int, float, str]


def to_decimal(value: MoneyInput) -> Decimal:
    """Convert a raw amount to `Decimal` without going through binary floats."""
    if isinstance(value, bool):
        raise ValueError("Amount must be a number")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValueError(f"Invalid amount: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return result


def quantize_money(value: MoneyInput) -> Decimal:
    """Round to cents (ROUND_HALF_UP)."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def has_sub_cent_precision(value: Decimal) -> bool:
    """True when the value cannot be represented in whole cents."""
    return value != value.quantize(CENT, rounding=ROUND_HALF_UP)
