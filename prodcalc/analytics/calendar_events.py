"""Calendar event synthesis from orders and procurements.

Events are derived, never stored. Ids are built from the source entity and the
event type, so synthesizing twice from unchanged data yields the same set.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from prodcalc.analytics.ranges import validate_range
from prodcalc.models import (
    IN_PROGRESS_STATUSES,
    CalendarEvent,
    EventStatus,
    EventType,
    ManufactureProcurement,
    Order,
    OrderStatus,
    Procurement,
    PurchaseProcurement,
    normalize_status,
)
from prodcalc.repository import OrderRepository


def event_id(entity: str, entity_id: str | int, event_type: EventType) -> str:
    return f"{entity}-{entity_id}-{event_type.value}"


def due_date_status(order: Order, today: date) -> EventStatus:
    if order.status == OrderStatus.COMPLETED:
        return EventStatus.COMPLETED
    if order.due_date < today:
        return EventStatus.OVERDUE
    return EventStatus.PENDING


def procurement_status(proc: Procurement) -> EventStatus:
    """Mirror the free-form procurement status onto the event status set."""
    if proc.is_complete:
        return EventStatus.COMPLETED
    if normalize_status(proc.status) in IN_PROGRESS_STATUSES:
        return EventStatus.IN_PROGRESS
    return EventStatus.PENDING


def _order_events(order: Order, today: date) -> list[CalendarEvent]:
    return [
        CalendarEvent(
            id=event_id("order", order.order_id, EventType.DUE_DATE),
            title=f"Due: {order.product_name or order.order_id}",
            date=order.due_date,
            type=EventType.DUE_DATE,
            status=due_date_status(order, today),
            order_id=order.order_id,
        )
    ]


def _procurement_events(proc: Procurement) -> list[CalendarEvent]:
    label = proc.item_name or f"#{proc.id}"
    events: list[CalendarEvent] = []

    def add(event_type: EventType, when: date, title: str, status: EventStatus) -> None:
        events.append(
            CalendarEvent(
                id=event_id("procurement", proc.id, event_type),
                title=title,
                date=when,
                type=event_type,
                status=status,
                order_id=proc.order_id,
                procurement_id=proc.id,
            )
        )

    if isinstance(proc, PurchaseProcurement):
        if proc.eta is not None:
            add(EventType.ETA, proc.eta, f"Purchase ETA: {label}", procurement_status(proc))
        if proc.received_at is not None:
            add(EventType.RECEIVED, proc.received_at, f"Received: {label}", EventStatus.COMPLETED)
    elif isinstance(proc, ManufactureProcurement):
        if proc.eta is not None:
            add(EventType.ETA, proc.eta, f"Manufacture ETA: {label}", procurement_status(proc))
        if proc.completed_at is not None:
            add(EventType.COMPLETED, proc.completed_at, f"Completed: {label}", EventStatus.COMPLETED)

    return events


def synthesize_events(
    orders: Iterable[Order],
    procurements: Iterable[Procurement],
    today: date,
    sort: bool = False,
) -> list[CalendarEvent]:
    """Flatten orders and procurements into deduplicated calendar events (pure)."""
    events: list[CalendarEvent] = []
    seen: set[str] = set()

    def collect(candidates: list[CalendarEvent]) -> None:
        for event in candidates:
            if event.id in seen:
                continue
            seen.add(event.id)
            events.append(event)

    for order in orders:
        collect(_order_events(order, today))
    for proc in procurements:
        collect(_procurement_events(proc))

    if sort:
        events.sort(key=lambda e: (e.date, e.id))
    return events


async def synthesize_calendar(
    repo: OrderRepository,
    date_from: date | None = None,
    date_to: date | None = None,
    today: date | None = None,
    sort: bool = False,
) -> list[CalendarEvent]:
    """Events for orders due within ``[date_from, date_to]`` and their procurements.

    Raises:
        InvalidRange: If ``date_from > date_to``
    """
    validate_range(date_from, date_to)
    today = today or date.today()

    orders = await repo.list_orders_due_between(date_from, date_to)
    procurements = await repo.list_procurements([o.order_id for o in orders])
    return synthesize_events(orders, procurements, today, sort=sort)
