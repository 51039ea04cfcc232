"""Data-quality flag construction for ProdCalc.

Flags are advisory: they never abort a computation, they are attached to the
successful result so the caller can decide whether to warn the end user.
"""

from __future__ import annotations

from collections.abc import Iterable

from prodcalc.models import Flag, FlagType


def missing_unit_price(procurement_id: int, item_name: str | None = None) -> Flag:
    label = f"Purchase {procurement_id}"
    if item_name:
        label = f"{label} ({item_name})"
    return Flag(
        type=FlagType.MATERIAL_COST_INCOMPLETE,
        message=f"{label} has no unit price; counted as 0 in material cost",
        ref=str(procurement_id),
    )


def rate_unavailable() -> Flag:
    return Flag(
        type=FlagType.RATE_UNAVAILABLE,
        message="Labor hourly rate is not configured; labor cost reported as 0",
    )


def no_quantity(order_id: str) -> Flag:
    return Flag(
        type=FlagType.NO_QUANTITY,
        message=f"Order {order_id} has zero quantity; actual time per unit reported as 0",
        ref=order_id,
    )


def no_standard(order_id: str) -> Flag:
    return Flag(
        type=FlagType.NO_STANDARD,
        message=f"Order {order_id} has no standard time per unit; variance reported as 0",
        ref=order_id,
    )


def empty_set(message: str = "No orders in the selected range") -> Flag:
    return Flag(type=FlagType.EMPTY_SET, message=message)


def merge_flags(*groups: Iterable[Flag]) -> list[Flag]:
    """Concatenate flag groups, dropping exact duplicates, keeping first-seen order."""
    merged: list[Flag] = []
    seen: set[tuple[FlagType, str, str | None]] = set()
    for group in groups:
        for flag in group:
            key = (flag.type, flag.message, flag.ref)
            if key in seen:
                continue
            seen.add(key)
            merged.append(flag)
    return merged


def has_flag(flags: Iterable[Flag], flag_type: FlagType) -> bool:
    return any(flag.type == flag_type for flag in flags)
