"""Production analytics engine.

Pure derivations from order, procurement and worker-log snapshots:
per-order KPIs, dashboard rollups, calendar events and monthly labor totals.
"""

from prodcalc.analytics.calendar_events import synthesize_calendar, synthesize_events
from prodcalc.analytics.dashboard import build_kpis_with_rollup, compute_dashboard_kpi, rollup
from prodcalc.analytics.kpi import (
    build_order_kpi,
    build_order_kpis,
    compute_order_kpi,
    list_order_kpis,
)
from prodcalc.analytics.labor import monthly_labor_report

__all__ = [
    "build_kpis_with_rollup",
    "build_order_kpi",
    "build_order_kpis",
    "compute_dashboard_kpi",
    "compute_order_kpi",
    "list_order_kpis",
    "monthly_labor_report",
    "rollup",
    "synthesize_calendar",
    "synthesize_events",
]
