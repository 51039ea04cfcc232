"""Excel export of order KPIs and the dashboard summary."""

from __future__ import annotations

from io import BytesIO
from typing import Iterable

import pandas as pd

from prodcalc.models import DashboardKPI, OrderKPI
from prodcalc.reporting.csv_export import ORDER_KPI_COLUMNS, material_unit_cost


def _num(value):
    return None if value is None else float(value)


def kpi_frame(kpis: Iterable[OrderKPI]) -> pd.DataFrame:
    """Order KPIs as a DataFrame with the CSV column order."""
    rows = []
    for kpi in kpis:
        rows.append({
            "order_id": kpi.order_id,
            "product_name": kpi.product_name,
            "qty": _num(kpi.qty),
            "due_date": kpi.due_date.isoformat(),
            "sales": _num(kpi.sales),
            "material_unit_cost": _num(material_unit_cost(kpi)),
            "std_time_per_unit": _num(kpi.std_time_per_unit),
            "wage_rate": _num(kpi.wage_rate),
            "material_cost": _num(kpi.material_cost),
            "labor_cost": _num(kpi.labor_cost),
            "gross_profit": _num(kpi.gross_profit),
            "actual_time_per_unit": _num(kpi.actual_time_per_unit),
            "variance_pct": _num(kpi.variance_pct),
        })
    return pd.DataFrame(rows, columns=ORDER_KPI_COLUMNS)


def summary_frame(dashboard: DashboardKPI, currency: str | None = None) -> pd.DataFrame:
    summary = [
        ("From", dashboard.date_from.isoformat() if dashboard.date_from else ""),
        ("To", dashboard.date_to.isoformat() if dashboard.date_to else ""),
        ("Currency", currency or ""),
        ("Orders", dashboard.order_count),
        ("Total Sales", _num(dashboard.total_sales)),
        ("Total Gross Profit", _num(dashboard.total_gross_profit)),
        ("Total Std Hours", _num(dashboard.total_std_hours)),
        ("Total Actual Hours", _num(dashboard.total_actual_hours)),
        ("Avg Variance %", _num(dashboard.avg_variance_pct)),
        ("Purchase Completion Rate", _num(dashboard.purchase_completion_rate)),
        ("Manufacture Completion Rate", _num(dashboard.manufacture_completion_rate)),
    ]
    return pd.DataFrame(summary, columns=["Metric", "Value"])


def export_order_kpis_to_excel(
    kpis: Iterable[OrderKPI],
    dashboard: DashboardKPI,
    currency: str | None = None,
) -> BytesIO:
    """Generate an Excel workbook with a Summary sheet and an Orders sheet.

    ``currency`` labels the monetary columns on the Summary sheet; amounts are
    written as plain numbers.
    """

    output = BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        summary_frame(dashboard, currency).to_excel(writer, sheet_name="Summary", index=False)
        kpi_frame(kpis).to_excel(writer, sheet_name="Orders", index=False)

        flags = [
            {"Type": flag.type.value, "Message": flag.message, "Ref": flag.ref or ""}
            for flag in dashboard.flags
        ]
        if flags:
            pd.DataFrame(flags).to_excel(writer, sheet_name="Flags", index=False)

    output.seek(0)
    return output
