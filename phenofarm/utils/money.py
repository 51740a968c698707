# phenofarm/utils/money.py
"""Fixed-point money helpers.

All amounts are carried as integer cents. Conversion to and from decimal
numbers happens only at the API/storage boundary.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[int, float, str, Decimal]

_CENT = Decimal("0.01")


def to_cents(value: Number) -> int:
    # str() first so binary floats like 0.1 are read as written
    amount = Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)
    return int(amount * 100)


def to_decimal(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(_CENT)


def to_float(cents: int) -> float:
    return float(to_decimal(cents))


def percent_of(cents: int, rate: Number) -> int:
    """cents * rate, rounded half-up to a whole cent."""
    amount = Decimal(cents) * Decimal(str(rate))
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_money(cents: int) -> str:
    return f"${to_decimal(cents):,.2f}"
