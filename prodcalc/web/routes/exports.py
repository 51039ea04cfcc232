"""Export API routes (CSV and Excel downloads).

Results are computed before the response starts streaming, so a bad range
or month still answers with a JSON error instead of a truncated file.
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from prodcalc.analytics import build_kpis_with_rollup, build_order_kpis, monthly_labor_report
from prodcalc.config import AnalyticsConfig, CostingConfig
from prodcalc.repository import OrderRepository
from prodcalc.reporting import (
    export_order_kpis_to_excel,
    iter_monthly_labor_csv,
    iter_order_kpis_csv,
)
from prodcalc.web.dependencies import get_analytics_settings, get_costing, get_repository

router = APIRouter(prefix="/api/exports", tags=["Exports"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _range_suffix(date_from: date | None, date_to: date | None) -> str:
    if date_from is None and date_to is None:
        return "all"
    return f"{date_from or 'start'}_{date_to or 'end'}"


@router.get("/orders.csv")
async def export_orders_csv(
    date_from: date | None = Query(None, alias="from"),
    date_to: date | None = Query(None, alias="to"),
    q: str | None = Query(None),
    repo: OrderRepository = Depends(get_repository),
    costing: CostingConfig = Depends(get_costing),
    analytics: AnalyticsConfig = Depends(get_analytics_settings),
):
    """Order KPIs as CSV, one row per order."""
    kpis = await build_order_kpis(
        repo, date_from, date_to, search=q, costing=costing, analytics=analytics
    )
    filename = f"order_kpis_{_range_suffix(date_from, date_to)}.csv"
    return StreamingResponse(
        iter_order_kpis_csv(kpis),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/orders.xlsx")
async def export_orders_xlsx(
    date_from: date | None = Query(None, alias="from"),
    date_to: date | None = Query(None, alias="to"),
    q: str | None = Query(None),
    repo: OrderRepository = Depends(get_repository),
    costing: CostingConfig = Depends(get_costing),
    analytics: AnalyticsConfig = Depends(get_analytics_settings),
):
    """Workbook with the dashboard summary and the order KPI table."""
    kpis, dashboard = await build_kpis_with_rollup(
        repo, date_from, date_to, search=q, costing=costing, analytics=analytics
    )
    buffer = export_order_kpis_to_excel(kpis, dashboard, currency=costing.currency)
    filename = f"order_kpis_{_range_suffix(date_from, date_to)}.xlsx"
    return StreamingResponse(
        buffer,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/monthly.csv")
async def export_monthly_csv(
    yyyymm: str = Query(..., description="Month as YYYY-MM"),
    repo: OrderRepository = Depends(get_repository),
    costing: CostingConfig = Depends(get_costing),
):
    """Per-order labor hours and cost for one month."""
    report = await monthly_labor_report(repo, yyyymm, costing=costing)
    filename = f"monthly_labor_{report.yyyymm}.csv"
    return StreamingResponse(
        iter_monthly_labor_csv(report),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
