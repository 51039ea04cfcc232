"""ProdCalc Pydantic models for type-safe data validation.

Input records (Order, Procurement, WorkerLog) are read-only snapshots handed
over by the repository. Output records (OrderKPI, DashboardKPI, CalendarEvent,
monthly labor rows) are computed on every request and never persisted.

Monetary and hour values are Decimal in Python and serialize to plain JSON
numbers.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, PlainSerializer, TypeAdapter

# Decimal in Python, number in JSON
Amount = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json")
]


class OrderStatus(str, Enum):
    """Workflow status of a production order."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class FlagType(str, Enum):
    """Advisory data-quality conditions carried on successful results."""

    MATERIAL_COST_INCOMPLETE = "material_cost_incomplete"
    RATE_UNAVAILABLE = "rate_unavailable"
    NO_QUANTITY = "no_quantity"
    NO_STANDARD = "no_standard"
    EMPTY_SET = "empty_set"


class EventType(str, Enum):
    DUE_DATE = "due_date"
    ETA = "eta"
    RECEIVED = "received"
    COMPLETED = "completed"


class EventStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"


# Terminal statuses per procurement kind (compared case-insensitively)
PURCHASE_DONE_STATUSES = frozenset({"received", "done"})
MANUFACTURE_DONE_STATUSES = frozenset({"completed", "done"})
IN_PROGRESS_STATUSES = frozenset({"ordered", "in_progress"})


def normalize_status(status: str | None) -> str:
    return (status or "").strip().lower()


class Flag(BaseModel):
    """Non-fatal data-quality issue detected during a computation."""

    type: FlagType
    message: str
    ref: str | None = None  # id of the offending record, if any

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "type": "material_cost_incomplete",
                "message": "Purchase 12 has no unit price; counted as 0",
                "ref": "12",
            }
        }


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------


class Order(BaseModel):
    """Production order header; aggregation root for procurement and labor."""

    order_id: str
    product_name: str | None = None
    customer_name: str | None = None

    qty: Decimal = Field(ge=0)
    order_date: dt.date | None = None
    start_date: dt.date | None = None
    due_date: dt.date

    sales: Decimal | None = Field(default=None, ge=0)
    estimated_amount: Decimal | None = Field(default=None, ge=0)
    estimated_material_cost: Decimal = Field(default=Decimal("0"), ge=0)
    std_time_per_unit: Decimal = Field(default=Decimal("0"), ge=0)
    status: OrderStatus = OrderStatus.PENDING

    @property
    def reference_date(self) -> dt.date:
        """Date used by ranged queries: order date, else due date."""
        return self.order_date or self.due_date

    @property
    def revenue(self) -> Decimal:
        """Sales, falling back to the estimated amount, else zero."""
        if self.sales is not None:
            return self.sales
        if self.estimated_amount is not None:
            return self.estimated_amount
        return Decimal("0")

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "order_id": "SO-2025-0042",
                "product_name": "Bracket A-200",
                "qty": "100",
                "due_date": "2025-06-01",
                "sales": "250000",
                "std_time_per_unit": "0.5",
                "status": "in_progress",
            }
        }


class _ProcurementBase(BaseModel):
    id: int
    order_id: str
    item_name: str | None = None
    qty: Decimal = Field(default=Decimal("0"), ge=0)
    unit: str | None = None
    eta: dt.date | None = None
    status: str | None = None

    class Config:
        frozen = True
        extra = "forbid"  # purchase fields never appear on a manufacture step


class PurchaseProcurement(_ProcurementBase):
    """Bought-in material for an order."""

    kind: Literal["purchase"] = "purchase"
    vendor: str | None = None
    unit_price: Decimal | None = Field(default=None, ge=0)
    received_at: dt.date | None = None

    @property
    def is_complete(self) -> bool:
        return normalize_status(self.status) in PURCHASE_DONE_STATUSES


class ManufactureProcurement(_ProcurementBase):
    """In-house manufacturing step for an order."""

    kind: Literal["manufacture"] = "manufacture"
    std_time_per_unit: Decimal | None = Field(default=None, ge=0)
    # Planning figure only; actual labor comes from WorkerLog
    act_time_per_unit: Decimal | None = Field(default=None, ge=0)
    worker: str | None = None
    completed_at: dt.date | None = None

    @property
    def is_complete(self) -> bool:
        return normalize_status(self.status) in MANUFACTURE_DONE_STATUSES


Procurement = Annotated[
    Union[PurchaseProcurement, ManufactureProcurement],
    Field(discriminator="kind"),
]

procurement_adapter: TypeAdapter[Procurement] = TypeAdapter(Procurement)


class WorkerLog(BaseModel):
    """Immutable actual-time ledger entry."""

    id: int
    order_id: str
    qty: Decimal = Field(ge=0)
    act_time_per_unit: Decimal = Field(ge=0)
    worker: str
    date: dt.date

    @property
    def hours(self) -> Decimal:
        return self.qty * self.act_time_per_unit

    class Config:
        frozen = True


# ---------------------------------------------------------------------------
# Computed records
# ---------------------------------------------------------------------------


class OrderKPI(BaseModel):
    """Per-order KPI record consumed by the dashboard and the exports."""

    order_id: str
    product_name: str | None = None
    customer_name: str | None = None
    qty: Amount
    due_date: dt.date
    sales: Amount
    std_time_per_unit: Amount
    status: OrderStatus

    material_cost: Amount
    labor_cost: Amount
    gross_profit: Amount
    std_hours: Amount
    actual_hours: Amount
    actual_time_per_unit: Amount
    variance_pct: Amount
    wage_rate: Amount | None = None

    flags: list[Flag] = Field(default_factory=list)

    @property
    def has_flags(self) -> bool:
        return len(self.flags) > 0

    def has_flag(self, flag_type: FlagType) -> bool:
        return any(flag.type == flag_type for flag in self.flags)


class OrderKPIPage(BaseModel):
    items: list[OrderKPI]
    total: int
    page: int
    page_size: int


class DashboardKPI(BaseModel):
    """Totals over a date-filtered order set."""

    date_from: dt.date | None = None
    date_to: dt.date | None = None
    order_count: int

    total_sales: Amount
    total_gross_profit: Amount
    total_std_hours: Amount
    total_actual_hours: Amount
    avg_variance_pct: Amount
    purchase_completion_rate: Amount | None = None
    manufacture_completion_rate: Amount | None = None

    flags: list[Flag] = Field(default_factory=list)
    incomplete_order_ids: list[str] = Field(default_factory=list)


class CalendarEvent(BaseModel):
    """Dated marker derived from order/procurement fields."""

    id: str
    title: str
    date: dt.date
    type: EventType
    status: EventStatus
    order_id: str | None = None
    procurement_id: int | None = None

    class Config:
        frozen = True


class MonthlyLaborRow(BaseModel):
    yyyymm: str
    order_id: str
    product_name: str | None = None
    customer_name: str | None = None
    total_hours: Amount
    entry_count: int
    labor_cost: Amount


class MonthlyLaborReport(BaseModel):
    yyyymm: str
    wage_rate: Amount | None = None
    rows: list[MonthlyLaborRow] = Field(default_factory=list)
    flags: list[Flag] = Field(default_factory=list)
