"""Tests for per-order KPI assembly and the paginated listing."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from prodcalc.analytics import (
    build_order_kpi,
    build_order_kpis,
    compute_dashboard_kpi,
    list_order_kpis,
    monthly_labor_report,
)
from prodcalc.config import AnalyticsConfig, reset_config
from prodcalc.errors import InvalidRange, NotFound
from prodcalc.models import FlagType


@pytest.mark.asyncio
async def test_build_order_kpi_full_order(repo, costing):
    kpi = await build_order_kpi(repo, "SO-1", costing=costing)

    assert kpi.sales == Decimal("250000.00")
    assert kpi.material_cost == Decimal("82500.00")
    assert kpi.labor_cost == Decimal("120000.00")
    assert kpi.gross_profit == Decimal("47500.00")
    assert kpi.std_hours == Decimal("50.00")
    assert kpi.actual_hours == Decimal("60.00")
    assert kpi.actual_time_per_unit == Decimal("0.60")
    assert kpi.variance_pct == Decimal("20.00")
    assert kpi.wage_rate == Decimal("2000")
    assert kpi.has_flag(FlagType.MATERIAL_COST_INCOMPLETE)
    assert not kpi.has_flag(FlagType.RATE_UNAVAILABLE)


@pytest.mark.asyncio
async def test_build_order_kpi_estimate_and_negative_profit(repo, costing):
    kpi = await build_order_kpi(repo, "SO-2", costing=costing)

    assert kpi.sales == Decimal("80000.00")
    assert kpi.labor_cost == Decimal("90000.00")
    assert kpi.gross_profit == Decimal("-10000.00")
    assert kpi.variance_pct == Decimal("-10.00")
    assert kpi.flags == []


@pytest.mark.asyncio
async def test_build_order_kpi_zero_quantity(repo, costing):
    kpi = await build_order_kpi(repo, "SO-3", costing=costing)

    assert kpi.actual_time_per_unit == Decimal("0.00")
    assert kpi.variance_pct == Decimal("0.00")
    assert kpi.has_flag(FlagType.NO_QUANTITY)
    assert kpi.has_flag(FlagType.NO_STANDARD)


@pytest.mark.asyncio
async def test_build_order_kpi_without_rate(repo, no_rate_costing):
    kpi = await build_order_kpi(repo, "SO-1", costing=no_rate_costing)

    assert kpi.labor_cost == Decimal("0.00")
    assert kpi.wage_rate is None
    assert kpi.gross_profit == Decimal("167500.00")
    assert kpi.has_flag(FlagType.RATE_UNAVAILABLE)


@pytest.mark.asyncio
async def test_build_order_kpi_reads_rate_from_environment(repo, monkeypatch):
    monkeypatch.setenv("LABOR_HOURLY_RATE", "1500")

    kpi = await build_order_kpi(repo, "SO-1")

    assert kpi.labor_cost == Decimal("90000.00")


@pytest.mark.asyncio
async def test_core_operations_run_without_database_url(repo, monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("LABOR_HOURLY_RATE", "2000")
    reset_config()

    kpi = await build_order_kpi(repo, "SO-1")
    kpis = await build_order_kpis(repo)
    page = await list_order_kpis(repo)
    dashboard = await compute_dashboard_kpi(repo, date(2025, 5, 1), date(2025, 5, 31))
    report = await monthly_labor_report(repo, "2025-05")

    assert kpi.gross_profit == Decimal("47500.00")
    assert [k.order_id for k in kpis] == ["SO-1", "SO-2", "SO-3"]
    assert page.total == 3
    assert dashboard.total_gross_profit == Decimal("37500.00")
    assert report.rows[0].order_id == "SO-1"


@pytest.mark.asyncio
async def test_build_order_kpi_unknown_order(repo, costing):
    with pytest.raises(NotFound) as exc_info:
        await build_order_kpi(repo, "NOPE", costing=costing)

    assert exc_info.value.status_code == 404
    assert "NOPE" in exc_info.value.message


@pytest.mark.asyncio
async def test_build_order_kpi_is_deterministic(repo, costing):
    first = await build_order_kpi(repo, "SO-1", costing=costing)
    second = await build_order_kpi(repo, "SO-1", costing=costing)

    assert first == second
    assert first.model_dump_json() == second.model_dump_json()


@pytest.mark.asyncio
async def test_build_order_kpis_filters_on_reference_date(repo, costing, analytics_settings):
    kpis = await build_order_kpis(
        repo,
        date(2025, 5, 1),
        date(2025, 5, 31),
        costing=costing,
        analytics=analytics_settings,
    )
    assert [k.order_id for k in kpis] == ["SO-1", "SO-2"]


@pytest.mark.asyncio
async def test_build_order_kpis_uses_due_date_without_order_date(repo, costing, analytics_settings):
    kpis = await build_order_kpis(
        repo,
        date(2025, 7, 1),
        date(2025, 7, 31),
        costing=costing,
        analytics=analytics_settings,
    )
    assert [k.order_id for k in kpis] == ["SO-3"]


class TestListOrderKpis:
    @pytest.mark.asyncio
    async def test_first_page(self, repo, costing, analytics_settings):
        page = await list_order_kpis(
            repo, page=1, page_size=2, costing=costing, analytics=analytics_settings
        )
        assert page.total == 3
        assert [k.order_id for k in page.items] == ["SO-1", "SO-2"]

    @pytest.mark.asyncio
    async def test_last_page(self, repo, costing, analytics_settings):
        page = await list_order_kpis(
            repo, page=2, page_size=2, costing=costing, analytics=analytics_settings
        )
        assert page.total == 3
        assert page.page == 2
        assert [k.order_id for k in page.items] == ["SO-3"]

    @pytest.mark.asyncio
    async def test_page_past_end_is_empty(self, repo, costing, analytics_settings):
        page = await list_order_kpis(
            repo, page=5, page_size=2, costing=costing, analytics=analytics_settings
        )
        assert page.items == []
        assert page.total == 3

    @pytest.mark.asyncio
    async def test_default_page_size(self, repo, costing):
        page = await list_order_kpis(
            repo, costing=costing, analytics=AnalyticsConfig(default_page_size=1)
        )
        assert page.page_size == 1
        assert len(page.items) == 1

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive(self, repo, costing, analytics_settings):
        page = await list_order_kpis(
            repo, search="HOUSING", costing=costing, analytics=analytics_settings
        )
        assert [k.order_id for k in page.items] == ["SO-2"]

        page = await list_order_kpis(
            repo, search="so-3", costing=costing, analytics=analytics_settings
        )
        assert [k.order_id for k in page.items] == ["SO-3"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page,page_size", [(0, 10), (1, 0), (1, 201)])
    async def test_bad_paging_rejected(self, repo, costing, analytics_settings, page, page_size):
        with pytest.raises(InvalidRange):
            await list_order_kpis(
                repo,
                page=page,
                page_size=page_size,
                costing=costing,
                analytics=analytics_settings,
            )

    @pytest.mark.asyncio
    async def test_inverted_range_rejected(self, repo, costing, analytics_settings):
        with pytest.raises(InvalidRange):
            await list_order_kpis(
                repo,
                date(2025, 6, 1),
                date(2025, 5, 1),
                costing=costing,
                analytics=analytics_settings,
            )
