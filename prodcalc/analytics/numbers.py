"""Decimal helpers shared by the calculators."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0")
HUNDRED = Decimal("100")
TWO_PLACES = Decimal("0.01")


def round2(value: Decimal) -> Decimal:
    """Round half-up to 2 decimal places, never returning negative zero."""
    result = value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return result if result else result.copy_abs()


def safe_ratio(numerator: Decimal, denominator: Decimal) -> Decimal | None:
    """``numerator / denominator`` or None when the denominator is zero."""
    if not denominator:
        return None
    return numerator / denominator
