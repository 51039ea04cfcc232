"""Analytics API routes.

Read-only JSON endpoints over the KPI engine:
- GET /api/orders/kpis          - paginated per-order KPI listing
- GET /api/orders/{order_id}/kpi - single order KPI
- GET /api/dashboard            - range rollup
- GET /api/calendar             - synthesized due-date/procurement events
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from prodcalc.analytics import (
    build_order_kpi,
    compute_dashboard_kpi,
    list_order_kpis,
    synthesize_calendar,
)
from prodcalc.config import AnalyticsConfig, CostingConfig
from prodcalc.models import CalendarEvent, DashboardKPI, OrderKPI, OrderKPIPage
from prodcalc.repository import OrderRepository
from prodcalc.web.dependencies import get_analytics_settings, get_costing, get_repository

router = APIRouter(prefix="/api", tags=["Analytics"])


@router.get("/orders/kpis", response_model=OrderKPIPage)
async def order_kpis(
    date_from: date | None = Query(None, alias="from"),
    date_to: date | None = Query(None, alias="to"),
    q: str | None = Query(None, description="Substring of order id or product name"),
    page: int = Query(1),
    page_size: int | None = Query(None),
    repo: OrderRepository = Depends(get_repository),
    costing: CostingConfig = Depends(get_costing),
    analytics: AnalyticsConfig = Depends(get_analytics_settings),
):
    return await list_order_kpis(
        repo,
        date_from,
        date_to,
        search=q,
        page=page,
        page_size=page_size,
        costing=costing,
        analytics=analytics,
    )


@router.get("/orders/{order_id}/kpi", response_model=OrderKPI)
async def order_kpi(
    order_id: str,
    repo: OrderRepository = Depends(get_repository),
    costing: CostingConfig = Depends(get_costing),
):
    """KPI for one order. Unknown ids answer 404."""
    return await build_order_kpi(repo, order_id, costing=costing)


@router.get("/dashboard", response_model=DashboardKPI)
async def dashboard(
    date_from: date | None = Query(None, alias="from"),
    date_to: date | None = Query(None, alias="to"),
    repo: OrderRepository = Depends(get_repository),
    costing: CostingConfig = Depends(get_costing),
    analytics: AnalyticsConfig = Depends(get_analytics_settings),
):
    return await compute_dashboard_kpi(
        repo, date_from, date_to, costing=costing, analytics=analytics
    )


@router.get("/calendar", response_model=list[CalendarEvent])
async def calendar(
    date_from: date | None = Query(None, alias="from"),
    date_to: date | None = Query(None, alias="to"),
    sort: bool = Query(False, description="Order events by date, then id"),
    repo: OrderRepository = Depends(get_repository),
):
    return await synthesize_calendar(repo, date_from, date_to, sort=sort)
