"""Database layer for ProdCalc with async SQLAlchemy."""

from prodcalc.db.connection import get_session, init_db
from prodcalc.db.models import Base, OrderModel, ProcurementModel, WorkerLogModel
from prodcalc.db.repository import SqlOrderRepository

__all__ = [
    "Base",
    "OrderModel",
    "ProcurementModel",
    "WorkerLogModel",
    "SqlOrderRepository",
    "get_session",
    "init_db",
]
