"""Reporting module for ProdCalc.

Turns computed KPIs into export formats (CSV streams, Excel workbooks).
"""

from prodcalc.reporting.csv_export import (
    MONTHLY_LABOR_COLUMNS,
    ORDER_KPI_COLUMNS,
    iter_monthly_labor_csv,
    iter_order_kpis_csv,
)
from prodcalc.reporting.export import export_order_kpis_to_excel, kpi_frame

__all__ = [
    "MONTHLY_LABOR_COLUMNS",
    "ORDER_KPI_COLUMNS",
    "export_order_kpis_to_excel",
    "iter_monthly_labor_csv",
    "iter_order_kpis_csv",
    "kpi_frame",
]
