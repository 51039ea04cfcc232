"""Shared dependencies for ProdCalc web routes.

Dependencies are injected using FastAPI's Depends() system, which also lets
tests swap the SQL-backed repository for an in-memory one:

    app.dependency_overrides[get_repository] = lambda: InMemoryOrderRepository(...)
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

from prodcalc.config import AnalyticsConfig, CostingConfig, get_config
from prodcalc.db.connection import get_session
from prodcalc.db.repository import SqlOrderRepository
from prodcalc.repository import OrderRepository


async def get_repository() -> AsyncGenerator[OrderRepository, None]:
    """Yield an OrderRepository bound to one request-scoped session."""
    async with get_session() as session:
        yield SqlOrderRepository(session)


def get_costing() -> CostingConfig:
    return get_config().costing


def get_analytics_settings() -> AnalyticsConfig:
    return get_config().analytics
