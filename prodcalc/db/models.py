"""SQLAlchemy async database models for ProdCalc.

Maps the order-management tables the analytics engine reads from. Child rows
cascade with their order.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class OrderModel(Base):
    """Production order header."""

    __tablename__ = "orders"

    order_id: Mapped[str] = mapped_column(Text, primary_key=True)
    product_name: Mapped[str | None] = mapped_column(Text)
    customer_name: Mapped[str | None] = mapped_column(Text)

    qty: Mapped[Decimal] = mapped_column(Numeric(14, 3), nullable=False, default=0)
    order_date: Mapped[dt.date | None] = mapped_column(Date)
    start_date: Mapped[dt.date | None] = mapped_column(Date)
    due_date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    sales: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    estimated_amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    estimated_material_cost: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    std_time_per_unit: Mapped[Decimal | None] = mapped_column(Numeric(12, 4))
    status: Mapped[str] = mapped_column(Text, nullable=False, default="pending")

    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    procurements: Mapped[list[ProcurementModel]] = relationship(
        back_populates="order", cascade="all, delete-orphan", passive_deletes=True
    )
    worker_logs: Mapped[list[WorkerLogModel]] = relationship(
        back_populates="order", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'in_progress', 'completed')", name="check_order_status"
        ),
        Index("idx_orders_due", "due_date"),
        Index("idx_orders_order_date", "order_date"),
        Index("idx_orders_status", "status"),
    )


class ProcurementModel(Base):
    """Purchase or manufacture step; kind-specific columns are nullable."""

    __tablename__ = "procurements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(
        Text, ForeignKey("orders.order_id", ondelete="CASCADE"), nullable=False
    )
    kind: Mapped[str] = mapped_column(Text, nullable=False)
    item_name: Mapped[str | None] = mapped_column(Text)
    qty: Mapped[Decimal | None] = mapped_column(Numeric(14, 3))
    unit: Mapped[str | None] = mapped_column(Text)
    eta: Mapped[dt.date | None] = mapped_column(Date)
    status: Mapped[str | None] = mapped_column(Text)

    # kind = purchase
    vendor: Mapped[str | None] = mapped_column(Text)
    unit_price: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    received_at: Mapped[dt.date | None] = mapped_column(Date)

    # kind = manufacture
    std_time_per_unit: Mapped[Decimal | None] = mapped_column(Numeric(12, 4))
    act_time_per_unit: Mapped[Decimal | None] = mapped_column(Numeric(12, 4))
    worker: Mapped[str | None] = mapped_column(Text)
    completed_at: Mapped[dt.date | None] = mapped_column(Date)

    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    order: Mapped[OrderModel] = relationship(back_populates="procurements")

    __table_args__ = (
        CheckConstraint("kind IN ('purchase', 'manufacture')", name="check_procurement_kind"),
        Index("idx_proc_orders", "order_id", "kind", "status"),
    )


class WorkerLogModel(Base):
    """Append-only actual-time ledger."""

    __tablename__ = "workers_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(
        Text, ForeignKey("orders.order_id", ondelete="CASCADE"), nullable=False
    )
    qty: Mapped[Decimal] = mapped_column(Numeric(14, 3), nullable=False)
    act_time_per_unit: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    worker: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    order: Mapped[OrderModel] = relationship(back_populates="worker_logs")

    __table_args__ = (Index("idx_wlog_order", "order_id", "date"),)
