"""SQLAlchemy-backed OrderRepository."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from prodcalc.db.models import OrderModel, ProcurementModel, WorkerLogModel
from prodcalc.models import (
    ManufactureProcurement,
    Order,
    OrderStatus,
    Procurement,
    PurchaseProcurement,
    WorkerLog,
)


class SqlOrderRepository:
    """Read-only queries over the orders/procurements/workers_log tables."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_order(self, order_id: str) -> Order | None:
        row = await self.session.get(OrderModel, order_id)
        return _to_order(row) if row else None

    async def get_orders(self, order_ids: Sequence[str]) -> list[Order]:
        if not order_ids:
            return []
        stmt = (
            select(OrderModel)
            .where(OrderModel.order_id.in_(list(order_ids)))
            .order_by(OrderModel.due_date, OrderModel.order_id)
        )
        result = await self.session.execute(stmt)
        return [_to_order(row) for row in result.scalars()]

    async def list_orders(
        self,
        date_from: date | None = None,
        date_to: date | None = None,
        search: str | None = None,
    ) -> list[Order]:
        reference_date = func.coalesce(OrderModel.order_date, OrderModel.due_date)
        stmt = select(OrderModel)
        if date_from is not None:
            stmt = stmt.where(reference_date >= date_from)
        if date_to is not None:
            stmt = stmt.where(reference_date <= date_to)
        if search:
            # Substring match; LIKE wildcards in the search text match literally
            needle = search.strip().lower()
            stmt = stmt.where(
                or_(
                    func.lower(OrderModel.order_id).contains(needle, autoescape=True),
                    func.lower(func.coalesce(OrderModel.product_name, "")).contains(
                        needle, autoescape=True
                    ),
                )
            )
        stmt = stmt.order_by(OrderModel.due_date, OrderModel.order_id)

        result = await self.session.execute(stmt)
        return [_to_order(row) for row in result.scalars()]

    async def list_orders_due_between(
        self, date_from: date | None = None, date_to: date | None = None
    ) -> list[Order]:
        stmt = select(OrderModel)
        if date_from is not None:
            stmt = stmt.where(OrderModel.due_date >= date_from)
        if date_to is not None:
            stmt = stmt.where(OrderModel.due_date <= date_to)
        stmt = stmt.order_by(OrderModel.due_date, OrderModel.order_id)

        result = await self.session.execute(stmt)
        return [_to_order(row) for row in result.scalars()]

    async def list_procurements(self, order_ids: Sequence[str]) -> list[Procurement]:
        if not order_ids:
            return []
        stmt = (
            select(ProcurementModel)
            .where(ProcurementModel.order_id.in_(list(order_ids)))
            .order_by(ProcurementModel.id)
        )
        result = await self.session.execute(stmt)
        return [_to_procurement(row) for row in result.scalars()]

    async def list_worker_logs(self, order_ids: Sequence[str]) -> list[WorkerLog]:
        if not order_ids:
            return []
        stmt = (
            select(WorkerLogModel)
            .where(WorkerLogModel.order_id.in_(list(order_ids)))
            .order_by(WorkerLogModel.id)
        )
        result = await self.session.execute(stmt)
        return [_to_worker_log(row) for row in result.scalars()]

    async def list_worker_logs_between(self, start: date, end: date) -> list[WorkerLog]:
        stmt = (
            select(WorkerLogModel)
            .where(WorkerLogModel.date >= start, WorkerLogModel.date <= end)
            .order_by(WorkerLogModel.id)
        )
        result = await self.session.execute(stmt)
        return [_to_worker_log(row) for row in result.scalars()]


def _dec(value: Decimal | float | None, default: str = "0") -> Decimal:
    if value is None:
        return Decimal(default)
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _opt_dec(value: Decimal | float | None) -> Decimal | None:
    return None if value is None else _dec(value)


def _to_order(row: OrderModel) -> Order:
    return Order(
        order_id=row.order_id,
        product_name=row.product_name,
        customer_name=row.customer_name,
        qty=_dec(row.qty),
        order_date=row.order_date,
        start_date=row.start_date,
        due_date=row.due_date,
        sales=_opt_dec(row.sales),
        estimated_amount=_opt_dec(row.estimated_amount),
        estimated_material_cost=_dec(row.estimated_material_cost),
        std_time_per_unit=_dec(row.std_time_per_unit),
        status=OrderStatus(row.status or OrderStatus.PENDING.value),
    )


def _to_procurement(row: ProcurementModel) -> Procurement:
    # Only the columns belonging to the row's kind are read
    common = {
        "id": row.id,
        "order_id": row.order_id,
        "item_name": row.item_name,
        "qty": _dec(row.qty),
        "unit": row.unit,
        "eta": row.eta,
        "status": row.status,
    }
    if row.kind == "purchase":
        return PurchaseProcurement(
            **common,
            vendor=row.vendor,
            unit_price=_opt_dec(row.unit_price),
            received_at=row.received_at,
        )
    return ManufactureProcurement(
        **common,
        std_time_per_unit=_opt_dec(row.std_time_per_unit),
        act_time_per_unit=_opt_dec(row.act_time_per_unit),
        worker=row.worker,
        completed_at=row.completed_at,
    )


def _to_worker_log(row: WorkerLogModel) -> WorkerLog:
    return WorkerLog(
        id=row.id,
        order_id=row.order_id,
        qty=_dec(row.qty),
        act_time_per_unit=_dec(row.act_time_per_unit),
        worker=row.worker,
        date=row.date,
    )
