"""Decimal helpers for monetary values."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

CENT = Decimal("0.01")
WHOLE = Decimal("1")


def to_decimal(value: Any) -> Decimal:
    """Converts ints, floats, strings and Decimals to Decimal.

    Floats go through ``str`` so 0.3 stays 0.3. Raises ValueError for
    anything that is not a finite number.
    """
    if value is None:
        raise ValueError("Amount is required")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, TypeError) as e:
            raise ValueError(f"Invalid amount: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return result


def quantize_money(value: Any) -> Decimal:
    """Rounds to cents, half-up."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def round_whole(value: Any) -> Decimal:
    """Rounds to whole currency units, half-up."""
    return to_decimal(value).quantize(WHOLE, rounding=ROUND_HALF_UP)
