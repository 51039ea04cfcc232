"""CSV export functionality for ProdCalc.

Provides streaming CSV generation for:
- Order KPIs (column order is a compatibility contract with downstream sheets)
- Monthly labor totals per order

The generators take already-computed results, so any NotFound/InvalidRange
is raised before the first byte is streamed.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable, Iterator
from decimal import Decimal
from io import StringIO

from prodcalc.analytics.numbers import round2
from prodcalc.models import MonthlyLaborReport, OrderKPI

ORDER_KPI_COLUMNS = [
    "order_id",
    "product_name",
    "qty",
    "due_date",
    "sales",
    "material_unit_cost",
    "std_time_per_unit",
    "wage_rate",
    "material_cost",
    "labor_cost",
    "gross_profit",
    "actual_time_per_unit",
    "variance_pct",
]

MONTHLY_LABOR_COLUMNS = [
    "order_id",
    "product_name",
    "customer_name",
    "total_hours",
    "entry_count",
    "labor_cost",
    "yyyymm",
]


def format_number(value: Decimal | None) -> str:
    """Plain 2-decimal rendering; empty for missing values. No locale."""
    if value is None:
        return ""
    return f"{round2(value):f}"


def material_unit_cost(kpi: OrderKPI) -> Decimal | None:
    if kpi.qty > 0:
        return round2(kpi.material_cost / kpi.qty)
    return None


def order_kpi_row(kpi: OrderKPI) -> list[str]:
    return [
        kpi.order_id,
        kpi.product_name or "",
        format_number(kpi.qty),
        kpi.due_date.isoformat(),
        format_number(kpi.sales),
        format_number(material_unit_cost(kpi)),
        format_number(kpi.std_time_per_unit),
        format_number(kpi.wage_rate),
        format_number(kpi.material_cost),
        format_number(kpi.labor_cost),
        format_number(kpi.gross_profit),
        format_number(kpi.actual_time_per_unit),
        format_number(kpi.variance_pct),
    ]


def _stream(header: list[str], rows: Iterable[list[str | int]]) -> Iterator[str]:
    output = StringIO()
    writer = csv.writer(output, lineterminator="\n")

    writer.writerow(header)
    yield output.getvalue()
    output.seek(0)
    output.truncate(0)

    for row in rows:
        writer.writerow(row)
        yield output.getvalue()
        output.seek(0)
        output.truncate(0)


def iter_order_kpis_csv(kpis: Iterable[OrderKPI]) -> Iterator[str]:
    """Generate CSV stream for order KPIs.

    Yields:
        CSV rows as strings, header first
    """
    return _stream(ORDER_KPI_COLUMNS, (order_kpi_row(kpi) for kpi in kpis))


def iter_monthly_labor_csv(report: MonthlyLaborReport) -> Iterator[str]:
    """Generate CSV stream for a monthly labor report.

    Yields:
        CSV rows as strings, header first
    """
    rows = (
        [
            row.order_id,
            row.product_name or "",
            row.customer_name or "",
            format_number(row.total_hours),
            row.entry_count,
            format_number(row.labor_cost),
            row.yyyymm,
        ]
        for row in report.rows
    )
    return _stream(MONTHLY_LABOR_COLUMNS, rows)


def render_order_kpis_csv(kpis: Iterable[OrderKPI]) -> str:
    return "".join(iter_order_kpis_csv(kpis))
