"""Material and labor cost aggregation for a single order.

Rules:
- material cost = Σ purchase ``unit_price × qty``; a purchase without a unit
  price contributes 0 and raises a ``material_cost_incomplete`` flag.
- labor cost = Σ WorkerLog ``qty × act_time_per_unit`` × hourly rate.
  WorkerLog is the only source of actual hours; the manufacture step's own
  ``act_time_per_unit`` is a planning figure and is never summed here.
- gross profit = revenue − material − labor, unclamped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from prodcalc.analytics.numbers import ZERO, round2
from prodcalc.flags import engine as flags
from prodcalc.models import Flag, Procurement, PurchaseProcurement, WorkerLog
from prodcalc.repository import OrderSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CostBreakdown:
    revenue: Decimal
    material_cost: Decimal
    labor_cost: Decimal
    gross_profit: Decimal
    actual_hours: Decimal  # unrounded, feeds the variance calculator
    wage_rate: Decimal | None
    flags: tuple[Flag, ...] = ()


def material_cost(procurements: Iterable[Procurement]) -> tuple[Decimal, list[Flag]]:
    total = ZERO
    found: list[Flag] = []
    for proc in procurements:
        if not isinstance(proc, PurchaseProcurement):
            continue
        if proc.unit_price is None:
            found.append(flags.missing_unit_price(proc.id, proc.item_name))
            continue
        total += proc.unit_price * proc.qty
    return total, found


def actual_hours(worker_logs: Iterable[WorkerLog]) -> Decimal:
    return sum((log.hours for log in worker_logs), ZERO)


def labor_cost(hours: Decimal, hourly_rate: Decimal | None) -> tuple[Decimal, list[Flag]]:
    if hourly_rate is None:
        return ZERO, [flags.rate_unavailable()]
    return hours * hourly_rate, []


def aggregate_costs(snapshot: OrderSnapshot, hourly_rate: Decimal | None) -> CostBreakdown:
    """Compute the cost side of an order KPI from one snapshot."""
    order = snapshot.order

    material, material_flags = material_cost(snapshot.procurements)
    hours = actual_hours(snapshot.worker_logs)
    labor, labor_flags = labor_cost(hours, hourly_rate)

    revenue = round2(order.revenue)
    material = round2(material)
    labor = round2(labor)

    found = material_flags + labor_flags
    if found:
        logger.debug(
            "Cost inputs incomplete for order %s: %s",
            order.order_id,
            ", ".join(flag.type.value for flag in found),
        )

    return CostBreakdown(
        revenue=revenue,
        material_cost=material,
        labor_cost=labor,
        # components are already rounded, so the identity holds exactly
        gross_profit=revenue - material - labor,
        actual_hours=hours,
        wage_rate=hourly_rate,
        flags=tuple(found),
    )
