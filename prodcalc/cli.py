"""ProdCalc CLI - terminal access to the KPI engine.

Commands:
- init: Initialize database schema
- kpi: Show the KPI of one order
- dashboard: Roll up KPIs over a date range
- calendar: List due-date and procurement events
- export-csv: Write order KPIs to CSV (or XLSX)
- monthly: Monthly labor hours and cost per order
- web serve: Run the FastAPI app
"""

from __future__ import annotations

import asyncio
from datetime import date
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from prodcalc.analytics import (
    build_kpis_with_rollup,
    build_order_kpi,
    build_order_kpis,
    compute_dashboard_kpi,
    monthly_labor_report,
    synthesize_calendar,
)
from prodcalc.config import get_config
from prodcalc.core.logging import configure_logging
from prodcalc.db.connection import close_db, get_session, init_db
from prodcalc.db.repository import SqlOrderRepository
from prodcalc.errors import AnalyticsError
from prodcalc.models import Flag
from prodcalc.reporting.csv_export import (
    format_number,
    iter_monthly_labor_csv,
    iter_order_kpis_csv,
)
from prodcalc.reporting.export import export_order_kpis_to_excel

app = typer.Typer(
    name="prodcalc",
    help="ProdCalc - production cost, labor variance and scheduling KPIs",
    no_args_is_help=True,
)
web_cli = typer.Typer(help="Web API")
app.add_typer(web_cli, name="web")

console = Console()


@app.callback()
def main(
    log_level: str | None = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
):
    """Configure logging from LOG_LEVEL / LOG_FORMAT before any command runs."""
    config = get_config()
    configure_logging(log_level or config.log_level, config.json_logs)


def _parse_date(value: str | None, option: str) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise typer.BadParameter(f"{option} must be YYYY-MM-DD, got {value!r}") from exc


def _run(coro):
    """Run an async command body, turning analytics errors into exit code 1."""

    async def _wrapped():
        try:
            return await coro
        finally:
            await close_db()

    try:
        return asyncio.run(_wrapped())
    except AnalyticsError as exc:
        console.print(f"[bold red]✗[/bold red] {exc.message}")
        raise typer.Exit(1) from exc


def _print_flags(flags: list[Flag]) -> None:
    for flag in flags:
        ref = f" ({flag.ref})" if flag.ref else ""
        console.print(f"  [yellow]⚠ {flag.type.value}[/yellow]: {flag.message}{ref}")


@app.command()
def init(
    drop: bool = typer.Option(False, "--drop", help="Drop existing tables"),
):
    """Initialize database schema."""
    config = get_config()
    console.print(f"[bold]Initializing database:[/bold] {config.db.url}")
    if drop:
        console.print("[yellow]Dropping existing tables...[/yellow]")

    _run(init_db(drop=drop))
    console.print("[bold green]✓[/bold green] Database initialized")


@app.command()
def kpi(order_id: str = typer.Argument(..., help="Order id")):
    """Show cost, profit and labor variance for one order."""

    async def _kpi():
        async with get_session() as session:
            return await build_order_kpi(SqlOrderRepository(session), order_id)

    result = _run(_kpi())

    table = Table(title=f"Order {result.order_id}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="green")

    table.add_row("Product", result.product_name or "-")
    table.add_row("Customer", result.customer_name or "-")
    table.add_row("Qty", format_number(result.qty))
    table.add_row("Due", result.due_date.isoformat())
    table.add_row("Sales", format_number(result.sales))
    table.add_row("Material Cost", format_number(result.material_cost))
    table.add_row("Labor Cost", format_number(result.labor_cost))
    table.add_row("Gross Profit", format_number(result.gross_profit))
    table.add_row("Std Hours", format_number(result.std_hours))
    table.add_row("Actual Hours", format_number(result.actual_hours))
    table.add_row("Actual Time / Unit", format_number(result.actual_time_per_unit))
    table.add_row("Variance %", format_number(result.variance_pct))

    console.print(table)
    _print_flags(result.flags)


@app.command()
def dashboard(
    date_from: str | None = typer.Option(None, "--from", help="Start date (YYYY-MM-DD)"),
    date_to: str | None = typer.Option(None, "--to", help="End date (YYYY-MM-DD)"),
):
    """Roll up order KPIs over a date range."""
    start = _parse_date(date_from, "--from")
    end = _parse_date(date_to, "--to")

    async def _dashboard():
        async with get_session() as session:
            return await compute_dashboard_kpi(SqlOrderRepository(session), start, end)

    result = _run(_dashboard())

    def rate(value):
        return "-" if value is None else f"{value * 100:.1f}%"

    table = Table(title="Dashboard")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="green")

    table.add_row("Orders", str(result.order_count))
    table.add_row("Total Sales", format_number(result.total_sales))
    table.add_row("Total Gross Profit", format_number(result.total_gross_profit))
    table.add_row("Total Std Hours", format_number(result.total_std_hours))
    table.add_row("Total Actual Hours", format_number(result.total_actual_hours))
    table.add_row("Avg Variance %", format_number(result.avg_variance_pct))
    table.add_row("Purchase Completion", rate(result.purchase_completion_rate))
    table.add_row("Manufacture Completion", rate(result.manufacture_completion_rate))

    console.print(table)
    if result.incomplete_order_ids:
        console.print(
            f"[yellow]Orders with incomplete data:[/yellow] "
            f"{', '.join(result.incomplete_order_ids)}"
        )
    _print_flags(result.flags)


@app.command()
def calendar(
    date_from: str | None = typer.Option(None, "--from", help="Start date (YYYY-MM-DD)"),
    date_to: str | None = typer.Option(None, "--to", help="End date (YYYY-MM-DD)"),
):
    """List due dates and procurement events, earliest first."""
    start = _parse_date(date_from, "--from")
    end = _parse_date(date_to, "--to")

    async def _calendar():
        async with get_session() as session:
            return await synthesize_calendar(
                SqlOrderRepository(session), start, end, sort=True
            )

    events = _run(_calendar())
    if not events:
        console.print("[yellow]No events in range[/yellow]")
        return

    status_styles = {
        "overdue": "red",
        "completed": "green",
        "in_progress": "yellow",
        "pending": "white",
    }

    table = Table(title="Calendar")
    table.add_column("Date", style="cyan")
    table.add_column("Event")
    table.add_column("Order")
    table.add_column("Status")

    for event in events:
        style = status_styles.get(event.status.value, "white")
        table.add_row(
            event.date.isoformat(),
            event.title,
            event.order_id,
            f"[{style}]{event.status.value}[/{style}]",
        )

    console.print(table)


@app.command(name="export-csv")
def export_csv(
    output: Path = typer.Option(..., "--out", "-o", help="Output file (.csv or .xlsx)"),
    date_from: str | None = typer.Option(None, "--from", help="Start date (YYYY-MM-DD)"),
    date_to: str | None = typer.Option(None, "--to", help="End date (YYYY-MM-DD)"),
    search: str | None = typer.Option(None, "--q", help="Order id / product filter"),
):
    """Export order KPIs. A .xlsx suffix writes the Excel workbook instead."""
    start = _parse_date(date_from, "--from")
    end = _parse_date(date_to, "--to")
    as_excel = output.suffix.lower() == ".xlsx"

    async def _export():
        async with get_session() as session:
            repo = SqlOrderRepository(session)
            if as_excel:
                return await build_kpis_with_rollup(repo, start, end, search=search)
            return await build_order_kpis(repo, start, end, search=search), None

    kpis, summary = _run(_export())

    if as_excel:
        workbook = export_order_kpis_to_excel(kpis, summary, currency=get_config().costing.currency)
        output.write_bytes(workbook.getvalue())
    else:
        with output.open("w", encoding="utf-8", newline="") as fh:
            fh.writelines(iter_order_kpis_csv(kpis))

    console.print(f"[green]✓[/green] Exported {len(kpis)} orders to: {output}")


@app.command()
def monthly(
    yyyymm: str = typer.Argument(..., help="Month as YYYY-MM"),
    output: Path | None = typer.Option(None, "--out", "-o", help="Output CSV file"),
):
    """Labor hours and cost per order for one month."""

    async def _monthly():
        async with get_session() as session:
            return await monthly_labor_report(SqlOrderRepository(session), yyyymm)

    report = _run(_monthly())

    if output:
        with output.open("w", encoding="utf-8", newline="") as fh:
            fh.writelines(iter_monthly_labor_csv(report))
        console.print(f"[green]✓[/green] Report saved to: {output}")
        return

    table = Table(title=f"Labor {report.yyyymm}")
    table.add_column("Order", style="cyan")
    table.add_column("Product")
    table.add_column("Customer")
    table.add_column("Hours", justify="right")
    table.add_column("Entries", justify="right")
    table.add_column("Labor Cost", justify="right", style="green")

    for row in report.rows:
        table.add_row(
            row.order_id,
            row.product_name or "-",
            row.customer_name or "-",
            format_number(row.total_hours),
            str(row.entry_count),
            format_number(row.labor_cost),
        )

    console.print(table)
    _print_flags(report.flags)


@web_cli.command("serve")
def web_serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind"),
    port: int = typer.Option(8001, help="Port to bind"),
    reload: bool = typer.Option(False, help="Enable autoreload (dev only)"),
):
    """Run the FastAPI app."""
    import uvicorn

    typer.echo(f"Starting ProdCalc API on http://{host}:{port}")
    uvicorn.run("prodcalc.web.app:app", host=host, port=port, reload=reload, workers=1)


if __name__ == "__main__":
    app()
