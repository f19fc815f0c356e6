"""Decimal helpers for Fulfillment Profit Calculator."""

from __future__ import annotations

from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Union

Numeric = Union[Decimal, int, float, str, None]

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")
PERCENT_PRECISION = Decimal("0.01")


def to_decimal(value: Numeric) -> Decimal | None:
    """Convert a raw value to Decimal, or None if it cannot be parsed."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, str):
            cleaned = value.strip().replace(",", "").lstrip("$")
            if not cleaned:
                return None
            return Decimal(cleaned)
        # Go through str() so 0.1 becomes Decimal("0.1"), not its binary expansion
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def clamp_non_negative(value: Numeric) -> tuple[Decimal, bool]:
    """Return the value as a finite, non-negative Decimal and whether it was clamped.

    Missing values count as zero without being reported as clamped.
    """
    if value is None:
        return ZERO, False
    parsed = to_decimal(value)
    if parsed is None or not parsed.is_finite() or parsed < 0:
        return ZERO, True
    return parsed, False


def _quantize(value: Decimal, precision: Decimal, rounding: str) -> Decimal:
    """Quantize with enough working precision for the integer digits of value."""
    digits = max(value.adjusted(), 0) + 1 - precision.as_tuple().exponent
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, digits + 1)
        return value.quantize(precision, rounding=rounding)


def round_money(value: Decimal, precision: Decimal = CENT) -> Decimal:
    """Round a monetary amount half-up to the given precision."""
    return _quantize(value, precision, ROUND_HALF_UP)


def round_percent(value: Decimal) -> Decimal:
    """Round a percentage half-up to two decimal places."""
    return _quantize(value, PERCENT_PRECISION, ROUND_HALF_UP)


def round_up_to_increment(value: Decimal, increment: Decimal) -> Decimal:
    """Round up to the next multiple of increment (no rounding if increment is 0)."""
    if increment <= 0:
        return value
    steps = (value / increment).to_integral_value(rounding=ROUND_CEILING)
    return steps * increment
