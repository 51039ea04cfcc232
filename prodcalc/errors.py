"""Failures raised by the analytics engine.

Only structural/input problems are raised. Data-quality problems (missing
unit price, missing hourly rate, zero quantity, zero standard time, empty
aggregation set) are never raised; they travel as ``Flag`` entries on the
successful result.
"""

from __future__ import annotations


class AnalyticsError(Exception):
    """Base class for failures surfaced to the API/CLI boundary."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(AnalyticsError):
    """Requested order id does not exist."""

    status_code = 404

    def __init__(self, order_id: str):
        super().__init__(f"Order '{order_id}' not found")
        self.order_id = order_id


class InvalidRange(AnalyticsError):
    """Ranged or paged query rejected before any aggregation begins."""

    status_code = 400
