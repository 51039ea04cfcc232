"""Actual-vs-standard time variance for a single order."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from prodcalc.analytics.numbers import HUNDRED, ZERO, round2
from prodcalc.flags import engine as flags
from prodcalc.models import Flag, Order


@dataclass(frozen=True, slots=True)
class VarianceResult:
    actual_time_per_unit: Decimal
    variance_pct: Decimal
    flags: tuple[Flag, ...] = ()


def compute_variance(order: Order, actual_hours: Decimal) -> VarianceResult:
    """Derive actual time per unit and the variance percentage.

    Zero quantity yields ``actual_time_per_unit = 0`` (``no_quantity``); zero
    standard time yields ``variance_pct = 0`` (``no_standard``). Both are
    guards against undefined values, not claims that the variance is zero.
    """
    found: list[Flag] = []

    if order.qty > 0:
        per_unit = actual_hours / order.qty
    else:
        per_unit = ZERO
        found.append(flags.no_quantity(order.order_id))

    std = order.std_time_per_unit
    if std > 0:
        variance = (per_unit - std) / std * HUNDRED
    else:
        variance = ZERO
        found.append(flags.no_standard(order.order_id))

    return VarianceResult(
        actual_time_per_unit=round2(per_unit),
        variance_pct=round2(variance),
        flags=tuple(found),
    )
