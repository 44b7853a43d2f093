# accounting/services/money.py

"""
MONEY HELPERS

- Decimal quantized to 2dp (ROUND_HALF_UP) at every boundary
- Sums and comparisons in integer minor units (cents) to avoid drift
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    """Parse to an unquantized Decimal; raises ValueError on junk input."""
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, bool):
        raise ValueError(f"Invalid money value: {value!r}")
    if isinstance(value, Decimal):
        return value
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValueError(f"Invalid money value: {value!r}") from exc
    if not d.is_finite():
        raise ValueError(f"Invalid money value: {value!r}")
    return d


def money(value) -> Decimal:
    return to_decimal(value).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def has_sub_minor_precision(value) -> bool:
    d = to_decimal(value)
    return d != d.quantize(TWOPLACES)


def to_minor(value) -> int:
    """Decimal major units -> integer minor units (x100), half-up."""
    return int((money(value) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def from_minor(minor: int) -> Decimal:
    return (Decimal(int(minor)) / Decimal(100)).quantize(TWOPLACES)
