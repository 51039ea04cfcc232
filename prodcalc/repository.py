"""Read-only repository interface consumed by the analytics core.

The core never talks to a database handle directly: every operation receives
an ``OrderRepository``. ``InMemoryOrderRepository`` backs unit tests and
fixture-driven runs; ``prodcalc.db.repository.SqlOrderRepository`` backs the
web app and the CLI.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol

from prodcalc.models import Order, Procurement, WorkerLog


class OrderRepository(Protocol):
    """Read access to orders and their child records."""

    async def get_order(self, order_id: str) -> Order | None: ...

    async def get_orders(self, order_ids: Sequence[str]) -> list[Order]: ...

    async def list_orders(
        self,
        date_from: date | None = None,
        date_to: date | None = None,
        search: str | None = None,
    ) -> list[Order]:
        """Orders whose reference date lies in ``[date_from, date_to]``."""
        ...

    async def list_orders_due_between(
        self, date_from: date | None = None, date_to: date | None = None
    ) -> list[Order]: ...

    async def list_procurements(self, order_ids: Sequence[str]) -> list[Procurement]: ...

    async def list_worker_logs(self, order_ids: Sequence[str]) -> list[WorkerLog]: ...

    async def list_worker_logs_between(self, start: date, end: date) -> list[WorkerLog]: ...


@dataclass(slots=True)
class OrderSnapshot:
    """An order plus its children, read once and shared by all calculators."""

    order: Order
    procurements: list[Procurement] = field(default_factory=list)
    worker_logs: list[WorkerLog] = field(default_factory=list)


async def load_snapshot(repo: OrderRepository, order: Order) -> OrderSnapshot:
    snapshots = await load_snapshots(repo, [order])
    return snapshots[0]


async def load_snapshots(
    repo: OrderRepository, orders: Sequence[Order]
) -> list[OrderSnapshot]:
    """Batch-load children for many orders (one query per child table)."""
    if not orders:
        return []

    order_ids = [order.order_id for order in orders]
    procurements_by_order: dict[str, list[Procurement]] = defaultdict(list)
    for proc in await repo.list_procurements(order_ids):
        procurements_by_order[proc.order_id].append(proc)

    logs_by_order: dict[str, list[WorkerLog]] = defaultdict(list)
    for log in await repo.list_worker_logs(order_ids):
        logs_by_order[log.order_id].append(log)

    # Child order is fixed by id so repeated runs see identical sequences
    return [
        OrderSnapshot(
            order=order,
            procurements=sorted(procurements_by_order[order.order_id], key=lambda p: p.id),
            worker_logs=sorted(logs_by_order[order.order_id], key=lambda w: w.id),
        )
        for order in orders
    ]


def in_range(value: date | None, date_from: date | None, date_to: date | None) -> bool:
    if value is None:
        return False
    if date_from is not None and value < date_from:
        return False
    if date_to is not None and value > date_to:
        return False
    return True


def matches_search(order: Order, search: str | None) -> bool:
    if not search:
        return True
    needle = search.strip().lower()
    haystacks = (order.order_id, order.product_name or "")
    return any(needle in text.lower() for text in haystacks)


def order_sort_key(order: Order) -> tuple[date, str]:
    return (order.due_date, order.order_id)


class InMemoryOrderRepository:
    """Fixture-backed repository; holds plain lists and filters in Python."""

    def __init__(
        self,
        orders: Iterable[Order] = (),
        procurements: Iterable[Procurement] = (),
        worker_logs: Iterable[WorkerLog] = (),
    ):
        self._orders = {order.order_id: order for order in orders}
        self._procurements = list(procurements)
        self._worker_logs = list(worker_logs)

    async def get_order(self, order_id: str) -> Order | None:
        return self._orders.get(order_id)

    async def get_orders(self, order_ids: Sequence[str]) -> list[Order]:
        wanted = set(order_ids)
        return sorted(
            (o for o in self._orders.values() if o.order_id in wanted),
            key=order_sort_key,
        )

    async def list_orders(
        self,
        date_from: date | None = None,
        date_to: date | None = None,
        search: str | None = None,
    ) -> list[Order]:
        return sorted(
            (
                order
                for order in self._orders.values()
                if in_range(order.reference_date, date_from, date_to)
                and matches_search(order, search)
            ),
            key=order_sort_key,
        )

    async def list_orders_due_between(
        self, date_from: date | None = None, date_to: date | None = None
    ) -> list[Order]:
        return sorted(
            (o for o in self._orders.values() if in_range(o.due_date, date_from, date_to)),
            key=order_sort_key,
        )

    async def list_procurements(self, order_ids: Sequence[str]) -> list[Procurement]:
        wanted = set(order_ids)
        return sorted(
            (p for p in self._procurements if p.order_id in wanted), key=lambda p: p.id
        )

    async def list_worker_logs(self, order_ids: Sequence[str]) -> list[WorkerLog]:
        wanted = set(order_ids)
        return sorted(
            (w for w in self._worker_logs if w.order_id in wanted), key=lambda w: w.id
        )

    async def list_worker_logs_between(self, start: date, end: date) -> list[WorkerLog]:
        return sorted(
            (w for w in self._worker_logs if start <= w.date <= end), key=lambda w: w.id
        )
