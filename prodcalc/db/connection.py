"""Async engine and session lifecycle for ProdCalc.

One engine per process, created lazily from ``DATABASE_URL``. The analytics
engine only reads, but sessions still commit on success and roll back on error
so seeding code and tests can reuse the same helpers.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from prodcalc.config import DBConfig, get_config
from prodcalc.db.models import Base

_state: dict[str, Any] = {"engine": None, "sessions": None}


def _is_sqlite(url: str) -> bool:
    return make_url(url).get_backend_name() == "sqlite"


def engine_options(db: DBConfig) -> dict[str, Any]:
    """Keyword arguments for create_async_engine; pool tuning is server-only."""
    options: dict[str, Any] = {"echo": db.echo}
    if not _is_sqlite(db.url):
        options |= {
            "pool_size": db.pool_size,
            "max_overflow": db.pool_max_overflow,
            "pool_timeout": db.pool_timeout,
            "pool_pre_ping": True,
            "pool_recycle": 3600,
        }
    return options


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """Turn on FK enforcement so ON DELETE CASCADE applies on SQLite."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_engine() -> AsyncEngine:
    engine = _state["engine"]
    if engine is None:
        db = get_config().db
        engine = create_async_engine(db.url, **engine_options(db))
        if _is_sqlite(db.url):
            enable_sqlite_foreign_keys(engine)
        _state["engine"] = engine
    return engine


def get_session_factory() -> sessionmaker:
    factory = _state["sessions"]
    if factory is None:
        factory = sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)
        _state["sessions"] = factory
    return factory


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Open a session that commits on success and rolls back on error.

    Example:
        async with get_session() as session:
            kpi = await build_order_kpi(SqlOrderRepository(session), "SO-1")
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency variant of :func:`get_session`."""
    async with get_session() as session:
        yield session


async def init_db(drop: bool = False) -> None:
    """Create the orders/procurements/workers_log tables, optionally dropping first."""
    async with get_engine().begin() as conn:
        if drop:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose the engine; the next get_engine() call builds a fresh one."""
    engine = _state["engine"]
    if engine is not None:
        await engine.dispose()
    _state["engine"] = None
    _state["sessions"] = None
