"""Pytest configuration and fixtures for ProdCalc tests.

The sample data is a small shop floor:

- SO-1: 100 brackets, std 0.5 h/unit, 60 logged hours, one priced purchase
  (110 x 750), one unpriced purchase and one manufacture step.
- SO-2: 50 housings priced by estimate only, 45 logged hours.
- SO-3: zero-quantity prototype with no standard time and no children.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from prodcalc.config import AnalyticsConfig, CostingConfig, reset_config
from prodcalc.models import (
    ManufactureProcurement,
    Order,
    OrderStatus,
    PurchaseProcurement,
    WorkerLog,
)
from prodcalc.repository import InMemoryOrderRepository


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch):
    """Set up test environment variables."""
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.delenv("LABOR_HOURLY_RATE", raising=False)
    monkeypatch.delenv("MAX_RANGE_DAYS", raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def costing() -> CostingConfig:
    """Costing settings with a 2000/h labor rate."""
    return CostingConfig(labor_hourly_rate=Decimal("2000"))


@pytest.fixture
def no_rate_costing() -> CostingConfig:
    return CostingConfig(labor_hourly_rate=None)


@pytest.fixture
def analytics_settings() -> AnalyticsConfig:
    return AnalyticsConfig()


@pytest.fixture
def bracket_order() -> Order:
    return Order(
        order_id="SO-1",
        product_name="Bracket A-200",
        customer_name="Acme",
        qty=Decimal("100"),
        order_date=date(2025, 5, 1),
        due_date=date(2025, 6, 1),
        sales=Decimal("250000"),
        std_time_per_unit=Decimal("0.5"),
        status=OrderStatus.IN_PROGRESS,
    )


@pytest.fixture
def housing_order() -> Order:
    return Order(
        order_id="SO-2",
        product_name="Housing B",
        customer_name="Beta",
        qty=Decimal("50"),
        order_date=date(2025, 5, 15),
        due_date=date(2025, 6, 20),
        estimated_amount=Decimal("80000"),
        std_time_per_unit=Decimal("1.0"),
    )


@pytest.fixture
def prototype_order() -> Order:
    return Order(
        order_id="SO-3",
        product_name="Prototype",
        qty=Decimal("0"),
        due_date=date(2025, 7, 10),
        sales=Decimal("10000"),
    )


@pytest.fixture
def orders(bracket_order, housing_order, prototype_order) -> list[Order]:
    return [bracket_order, housing_order, prototype_order]


@pytest.fixture
def procurements():
    return [
        PurchaseProcurement(
            id=1,
            order_id="SO-1",
            item_name="Steel plate",
            qty=Decimal("110"),
            unit_price=Decimal("750"),
            vendor="Kobe Steel",
            status="received",
            eta=date(2025, 5, 10),
            received_at=date(2025, 5, 12),
        ),
        PurchaseProcurement(
            id=2,
            order_id="SO-1",
            item_name="Bolts",
            qty=Decimal("400"),
            status="ordered",
            eta=date(2025, 5, 20),
        ),
        ManufactureProcurement(
            id=3,
            order_id="SO-1",
            item_name="Welding",
            qty=Decimal("100"),
            std_time_per_unit=Decimal("0.5"),
            act_time_per_unit=Decimal("0.7"),
            status="in_progress",
            eta=date(2025, 5, 25),
        ),
        ManufactureProcurement(
            id=4,
            order_id="SO-2",
            item_name="Machining",
            qty=Decimal("50"),
            status="completed",
            eta=date(2025, 6, 8),
            completed_at=date(2025, 6, 10),
        ),
    ]


@pytest.fixture
def worker_logs() -> list[WorkerLog]:
    return [
        WorkerLog(
            id=1,
            order_id="SO-1",
            qty=Decimal("60"),
            act_time_per_unit=Decimal("0.5"),
            worker="tanaka",
            date=date(2025, 5, 20),
        ),
        WorkerLog(
            id=2,
            order_id="SO-1",
            qty=Decimal("40"),
            act_time_per_unit=Decimal("0.75"),
            worker="sato",
            date=date(2025, 5, 21),
        ),
        WorkerLog(
            id=3,
            order_id="SO-2",
            qty=Decimal("50"),
            act_time_per_unit=Decimal("0.9"),
            worker="tanaka",
            date=date(2025, 6, 5),
        ),
    ]


@pytest.fixture
def repo(orders, procurements, worker_logs) -> InMemoryOrderRepository:
    """In-memory repository loaded with the three sample orders."""
    return InMemoryOrderRepository(orders, procurements, worker_logs)
