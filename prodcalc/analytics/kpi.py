"""Per-order KPI assembly and the paginated KPI listing."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from prodcalc.analytics.cost import aggregate_costs
from prodcalc.analytics.numbers import round2
from prodcalc.analytics.ranges import validate_paging, validate_range
from prodcalc.analytics.variance import compute_variance
from prodcalc.config import AnalyticsConfig, CostingConfig, get_config
from prodcalc.errors import NotFound
from prodcalc.flags.engine import merge_flags
from prodcalc.models import OrderKPI, OrderKPIPage
from prodcalc.repository import OrderRepository, OrderSnapshot, load_snapshot, load_snapshots

logger = logging.getLogger(__name__)


def resolve_settings(
    costing: CostingConfig | None, analytics: AnalyticsConfig | None
) -> tuple[CostingConfig, AnalyticsConfig]:
    """Fill in whichever settings the caller did not inject from get_config()."""
    if costing is None or analytics is None:
        config = get_config()
        costing = costing or config.costing
        analytics = analytics or config.analytics
    return costing, analytics


def compute_order_kpi(snapshot: OrderSnapshot, hourly_rate: Decimal | None) -> OrderKPI:
    """Build an OrderKPI from an already-loaded snapshot (pure)."""
    order = snapshot.order
    costs = aggregate_costs(snapshot, hourly_rate)
    variance = compute_variance(order, costs.actual_hours)

    return OrderKPI(
        order_id=order.order_id,
        product_name=order.product_name,
        customer_name=order.customer_name,
        qty=order.qty,
        due_date=order.due_date,
        sales=costs.revenue,
        std_time_per_unit=order.std_time_per_unit,
        status=order.status,
        material_cost=costs.material_cost,
        labor_cost=costs.labor_cost,
        gross_profit=costs.gross_profit,
        std_hours=round2(order.qty * order.std_time_per_unit),
        actual_hours=round2(costs.actual_hours),
        actual_time_per_unit=variance.actual_time_per_unit,
        variance_pct=variance.variance_pct,
        wage_rate=hourly_rate,
        flags=merge_flags(costs.flags, variance.flags),
    )


async def build_order_kpi(
    repo: OrderRepository,
    order_id: str,
    costing: CostingConfig | None = None,
) -> OrderKPI:
    """Fetch an order and its children once and derive its KPI.

    Raises:
        NotFound: If the order id does not exist
    """
    costing = costing or get_config().costing

    order = await repo.get_order(order_id)
    if order is None:
        raise NotFound(order_id)

    snapshot = await load_snapshot(repo, order)
    return compute_order_kpi(snapshot, costing.labor_hourly_rate)


async def build_order_kpis(
    repo: OrderRepository,
    date_from: date | None = None,
    date_to: date | None = None,
    search: str | None = None,
    costing: CostingConfig | None = None,
    analytics: AnalyticsConfig | None = None,
) -> list[OrderKPI]:
    """KPIs for every order whose reference date lies in the range."""
    costing, analytics = resolve_settings(costing, analytics)

    validate_range(date_from, date_to, analytics.max_range_days)

    orders = await repo.list_orders(date_from, date_to, search)
    snapshots = await load_snapshots(repo, orders)
    return [compute_order_kpi(s, costing.labor_hourly_rate) for s in snapshots]


async def list_order_kpis(
    repo: OrderRepository,
    date_from: date | None = None,
    date_to: date | None = None,
    search: str | None = None,
    page: int = 1,
    page_size: int | None = None,
    costing: CostingConfig | None = None,
    analytics: AnalyticsConfig | None = None,
) -> OrderKPIPage:
    """One page of order KPIs ordered by due date then order id.

    Raises:
        InvalidRange: On an inverted range or out-of-bounds paging
    """
    costing, analytics = resolve_settings(costing, analytics)
    if page_size is None:
        page_size = analytics.default_page_size

    validate_range(date_from, date_to, analytics.max_range_days)
    validate_paging(page, page_size, analytics.max_page_size)

    orders = await repo.list_orders(date_from, date_to, search)
    offset = (page - 1) * page_size
    window = orders[offset : offset + page_size]

    snapshots = await load_snapshots(repo, window)
    items = [compute_order_kpi(s, costing.labor_hourly_rate) for s in snapshots]

    logger.debug(
        "Listed %d of %d order KPIs (page %d, size %d)",
        len(items),
        len(orders),
        page,
        page_size,
    )
    return OrderKPIPage(items=items, total=len(orders), page=page, page_size=page_size)
