"""Tests for the dashboard rollup."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from prodcalc.analytics import build_order_kpi, compute_dashboard_kpi, rollup
from prodcalc.analytics.dashboard import completion_rate, weighted_variance
from prodcalc.config import AnalyticsConfig
from prodcalc.errors import InvalidRange
from prodcalc.models import FlagType, ManufactureProcurement, PurchaseProcurement
from prodcalc.repository import InMemoryOrderRepository

MAY_FROM = date(2025, 5, 1)
MAY_TO = date(2025, 5, 31)


class TestComputeDashboard:
    @pytest.mark.asyncio
    async def test_may_rollup(self, repo, costing, analytics_settings):
        dashboard = await compute_dashboard_kpi(
            repo, MAY_FROM, MAY_TO, costing=costing, analytics=analytics_settings
        )

        assert dashboard.order_count == 2
        assert dashboard.total_sales == Decimal("330000.00")
        assert dashboard.total_gross_profit == Decimal("37500.00")
        assert dashboard.total_std_hours == Decimal("100.00")
        assert dashboard.total_actual_hours == Decimal("105.00")
        # (20% x 50h + -10% x 50h) / 100h
        assert dashboard.avg_variance_pct == Decimal("5.00")
        assert dashboard.purchase_completion_rate == Decimal("0.50")
        assert dashboard.manufacture_completion_rate == Decimal("0.50")
        assert dashboard.incomplete_order_ids == ["SO-1"]
        assert dashboard.date_from == MAY_FROM
        assert dashboard.date_to == MAY_TO

    @pytest.mark.asyncio
    async def test_totals_equal_sum_of_order_kpis(self, repo, costing, analytics_settings):
        dashboard = await compute_dashboard_kpi(
            repo, MAY_FROM, MAY_TO, costing=costing, analytics=analytics_settings
        )
        kpis = [await build_order_kpi(repo, oid, costing=costing) for oid in ("SO-1", "SO-2")]

        assert dashboard.total_sales == sum(k.sales for k in kpis)
        assert dashboard.total_gross_profit == sum(k.gross_profit for k in kpis)
        assert dashboard.total_std_hours == sum(k.std_hours for k in kpis)
        assert dashboard.total_actual_hours == sum(k.actual_hours for k in kpis)

    @pytest.mark.asyncio
    async def test_empty_range(self, repo, costing, analytics_settings):
        dashboard = await compute_dashboard_kpi(
            repo,
            date(2030, 1, 1),
            date(2030, 1, 31),
            costing=costing,
            analytics=analytics_settings,
        )

        assert dashboard.order_count == 0
        assert dashboard.total_sales == Decimal("0")
        assert dashboard.avg_variance_pct == Decimal("0")
        assert dashboard.purchase_completion_rate is None
        assert dashboard.manufacture_completion_rate is None
        assert [f.type for f in dashboard.flags] == [FlagType.EMPTY_SET]

    @pytest.mark.asyncio
    async def test_no_purchases_means_no_purchase_rate(self, housing_order, costing):
        repo = InMemoryOrderRepository(
            [housing_order],
            [ManufactureProcurement(id=1, order_id="SO-2", status="done")],
        )
        dashboard = await compute_dashboard_kpi(
            repo, costing=costing, analytics=AnalyticsConfig()
        )

        assert dashboard.purchase_completion_rate is None
        assert dashboard.manufacture_completion_rate == Decimal("1.00")

    @pytest.mark.asyncio
    async def test_inverted_range_rejected(self, repo, costing, analytics_settings):
        with pytest.raises(InvalidRange) as exc_info:
            await compute_dashboard_kpi(
                repo, MAY_TO, MAY_FROM, costing=costing, analytics=analytics_settings
            )
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_range_wider_than_limit_rejected(self, repo, costing):
        limited = AnalyticsConfig(max_range_days=30)

        with pytest.raises(InvalidRange):
            await compute_dashboard_kpi(repo, MAY_FROM, MAY_TO, costing=costing, analytics=limited)

        dashboard = await compute_dashboard_kpi(
            repo, MAY_FROM, date(2025, 5, 30), costing=costing, analytics=limited
        )
        assert dashboard.order_count == 2

    @pytest.mark.asyncio
    async def test_rollup_is_linear_over_disjoint_ranges(self, repo, costing, analytics_settings):
        whole = await compute_dashboard_kpi(
            repo, MAY_FROM, date(2025, 7, 31), costing=costing, analytics=analytics_settings
        )
        first = await compute_dashboard_kpi(
            repo, MAY_FROM, date(2025, 5, 10), costing=costing, analytics=analytics_settings
        )
        second = await compute_dashboard_kpi(
            repo,
            date(2025, 5, 11),
            date(2025, 7, 31),
            costing=costing,
            analytics=analytics_settings,
        )

        assert whole.order_count == first.order_count + second.order_count == 3
        assert whole.total_sales == first.total_sales + second.total_sales
        assert whole.total_gross_profit == first.total_gross_profit + second.total_gross_profit


class TestRollupHelpers:
    def test_rollup_of_no_orders(self):
        dashboard = rollup([], [])
        assert dashboard.order_count == 0
        assert dashboard.incomplete_order_ids == []
        assert [f.type for f in dashboard.flags] == [FlagType.EMPTY_SET]

    @pytest.mark.asyncio
    async def test_weighted_variance_skips_unweighted_orders(self, repo, costing):
        kpis = [await build_order_kpi(repo, oid, costing=costing) for oid in ("SO-1", "SO-3")]
        mean, flags = weighted_variance(kpis)
        assert mean == Decimal("20.00")
        assert flags == []

    @pytest.mark.asyncio
    async def test_weighted_variance_without_any_weight(self, repo, costing):
        kpis = [await build_order_kpi(repo, "SO-3", costing=costing)]
        mean, flags = weighted_variance(kpis)
        assert mean == Decimal("0")
        assert [f.type for f in flags] == [FlagType.EMPTY_SET]

    def test_completion_rate_statuses(self):
        procs = [
            PurchaseProcurement(id=1, order_id="A", status="Received"),
            PurchaseProcurement(id=2, order_id="A", status=" done "),
            PurchaseProcurement(id=3, order_id="A", status="ordered"),
            PurchaseProcurement(id=4, order_id="A"),
        ]
        assert completion_rate(procs, PurchaseProcurement) == Decimal("0.50")
        assert completion_rate(procs, ManufactureProcurement) is None

    def test_completion_rate_bounds(self):
        procs = [ManufactureProcurement(id=i, order_id="A", status="completed") for i in range(3)]
        rate = completion_rate(procs, ManufactureProcurement)
        assert Decimal("0") <= rate <= Decimal("1")
        assert rate == Decimal("1.00")
