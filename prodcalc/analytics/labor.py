"""Monthly labor summary grouped by order (data behind ``monthly.csv``)."""

from __future__ import annotations

import logging
from collections import defaultdict

from prodcalc.analytics.cost import labor_cost
from prodcalc.analytics.numbers import ZERO, round2
from prodcalc.analytics.ranges import parse_month
from prodcalc.config import CostingConfig, get_config
from prodcalc.flags import engine as flags
from prodcalc.models import MonthlyLaborReport, MonthlyLaborRow, WorkerLog
from prodcalc.repository import OrderRepository

logger = logging.getLogger(__name__)


async def monthly_labor_report(
    repo: OrderRepository,
    yyyymm: str,
    costing: CostingConfig | None = None,
) -> MonthlyLaborReport:
    """Sum WorkerLog hours per order for one calendar month.

    Raises:
        InvalidRange: If ``yyyymm`` is not a valid ``YYYY-MM`` month
    """
    costing = costing or get_config().costing
    label, start, end = parse_month(yyyymm)

    logs_by_order: dict[str, list[WorkerLog]] = defaultdict(list)
    for log in await repo.list_worker_logs_between(start, end):
        logs_by_order[log.order_id].append(log)

    orders = {o.order_id: o for o in await repo.get_orders(sorted(logs_by_order))}
    rate = costing.labor_hourly_rate

    rows: list[MonthlyLaborRow] = []
    report_flags = [flags.rate_unavailable()] if rate is None else []
    for order_id in sorted(logs_by_order):
        entries = logs_by_order[order_id]
        hours = sum((entry.hours for entry in entries), ZERO)
        cost, _ = labor_cost(hours, rate)
        order = orders.get(order_id)
        rows.append(
            MonthlyLaborRow(
                yyyymm=label,
                order_id=order_id,
                product_name=order.product_name if order else None,
                customer_name=order.customer_name if order else None,
                total_hours=round2(hours),
                entry_count=len(entries),
                labor_cost=round2(cost),
            )
        )

    logger.debug("Monthly labor report %s: %d orders", label, len(rows))
    return MonthlyLaborReport(yyyymm=label, wage_rate=rate, rows=rows, flags=report_flags)
