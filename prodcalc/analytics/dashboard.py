"""Dashboard rollup over a date-filtered set of orders.

Totals are plain sums of the per-order KPI values, so the rollup of a range
always equals the sum of ``build_order_kpi`` over the same orders. The average
variance is weighted by each order's standard hours; orders without standard
hours carry no weight and are left out rather than counted as zero variance.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal

from prodcalc.analytics.kpi import compute_order_kpi, resolve_settings
from prodcalc.analytics.numbers import ZERO, round2, safe_ratio
from prodcalc.analytics.ranges import validate_range
from prodcalc.config import AnalyticsConfig, CostingConfig
from prodcalc.flags import engine as flags
from prodcalc.models import (
    DashboardKPI,
    Flag,
    ManufactureProcurement,
    OrderKPI,
    Procurement,
    PurchaseProcurement,
)
from prodcalc.repository import OrderRepository, load_snapshots

logger = logging.getLogger(__name__)


def weighted_variance(kpis: Iterable[OrderKPI]) -> tuple[Decimal, list[Flag]]:
    """Standard-hours-weighted mean of ``variance_pct``."""
    weighted_sum = ZERO
    total_weight = ZERO
    for kpi in kpis:
        if kpi.std_hours <= 0:
            continue
        weighted_sum += kpi.variance_pct * kpi.std_hours
        total_weight += kpi.std_hours

    mean = safe_ratio(weighted_sum, total_weight)
    if mean is None:
        return ZERO, [flags.empty_set("No orders with standard hours; average variance reported as 0")]
    return round2(mean), []


def completion_rate(
    procurements: Iterable[Procurement], kind: type[PurchaseProcurement] | type[ManufactureProcurement]
) -> Decimal | None:
    """Fraction of procurements of ``kind`` in a terminal status, None if there are none."""
    total = 0
    done = 0
    for proc in procurements:
        if not isinstance(proc, kind):
            continue
        total += 1
        if proc.is_complete:
            done += 1
    rate = safe_ratio(Decimal(done), Decimal(total))
    return None if rate is None else round2(rate)


def rollup(
    kpis: Sequence[OrderKPI],
    procurements: Sequence[Procurement],
    date_from: date | None = None,
    date_to: date | None = None,
) -> DashboardKPI:
    """Reduce per-order KPIs and their procurements into a DashboardKPI (pure)."""
    found: list[Flag] = []

    if kpis:
        avg_variance, variance_flags = weighted_variance(kpis)
        found.extend(variance_flags)
    else:
        avg_variance = ZERO
        found.append(flags.empty_set())

    return DashboardKPI(
        date_from=date_from,
        date_to=date_to,
        order_count=len(kpis),
        total_sales=sum((k.sales for k in kpis), ZERO),
        total_gross_profit=sum((k.gross_profit for k in kpis), ZERO),
        total_std_hours=sum((k.std_hours for k in kpis), ZERO),
        total_actual_hours=sum((k.actual_hours for k in kpis), ZERO),
        avg_variance_pct=avg_variance,
        purchase_completion_rate=completion_rate(procurements, PurchaseProcurement),
        manufacture_completion_rate=completion_rate(procurements, ManufactureProcurement),
        flags=found,
        incomplete_order_ids=[k.order_id for k in kpis if k.has_flags],
    )


async def build_kpis_with_rollup(
    repo: OrderRepository,
    date_from: date | None = None,
    date_to: date | None = None,
    search: str | None = None,
    costing: CostingConfig | None = None,
    analytics: AnalyticsConfig | None = None,
) -> tuple[list[OrderKPI], DashboardKPI]:
    """Order KPIs and their rollup from one read of the same filtered orders.

    The workbook export uses this so its Summary sheet totals exactly the rows
    on its Orders sheet.

    Raises:
        InvalidRange: If ``date_from > date_to`` or the range is too wide
    """
    costing, analytics = resolve_settings(costing, analytics)
    validate_range(date_from, date_to, analytics.max_range_days)

    orders = await repo.list_orders(date_from, date_to, search)
    snapshots = await load_snapshots(repo, orders)

    kpis = [compute_order_kpi(s, costing.labor_hourly_rate) for s in snapshots]
    procurements = [p for s in snapshots for p in s.procurements]

    dashboard = rollup(kpis, procurements, date_from, date_to)
    logger.info(
        "Dashboard rollup: %d orders, %d procurements, %d flagged orders",
        dashboard.order_count,
        len(procurements),
        len(dashboard.incomplete_order_ids),
    )
    return kpis, dashboard


async def compute_dashboard_kpi(
    repo: OrderRepository,
    date_from: date | None = None,
    date_to: date | None = None,
    costing: CostingConfig | None = None,
    analytics: AnalyticsConfig | None = None,
) -> DashboardKPI:
    """Aggregate order KPIs over ``[date_from, date_to]`` (inclusive).

    The range is checked before any repository read.

    Raises:
        InvalidRange: If ``date_from > date_to`` or the range is too wide
    """
    _, dashboard = await build_kpis_with_rollup(
        repo, date_from, date_to, costing=costing, analytics=analytics
    )
    return dashboard
