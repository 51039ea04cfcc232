"""Validation of caller-supplied ranges, months and paging."""

from __future__ import annotations

import calendar
import re
from datetime import date

from prodcalc.errors import InvalidRange

_MONTH_RE = re.compile(r"^(\d{4})-?(\d{2})$")


def validate_range(
    date_from: date | None,
    date_to: date | None,
    max_range_days: int | None = None,
) -> None:
    """Reject ``from > to`` and ranges wider than ``max_range_days``.

    Open-ended ranges (either bound missing) are accepted as-is.

    Raises:
        InvalidRange: If the range is inverted or too wide
    """
    if date_from is None or date_to is None:
        return
    if date_from > date_to:
        raise InvalidRange(
            f"Invalid range: from {date_from.isoformat()} is after to {date_to.isoformat()}"
        )
    if max_range_days is not None and (date_to - date_from).days + 1 > max_range_days:
        raise InvalidRange(
            f"Range {date_from.isoformat()}..{date_to.isoformat()} exceeds "
            f"the maximum of {max_range_days} days"
        )


def validate_paging(page: int, page_size: int, max_page_size: int) -> None:
    if page < 1:
        raise InvalidRange(f"page must be >= 1 (got {page})")
    if page_size < 1 or page_size > max_page_size:
        raise InvalidRange(
            f"page_size must be between 1 and {max_page_size} (got {page_size})"
        )


def parse_month(yyyymm: str) -> tuple[str, date, date]:
    """Parse ``YYYY-MM`` (or ``YYYYMM``) into (label, first day, last day).

    Raises:
        InvalidRange: If the value is not a valid calendar month
    """
    match = _MONTH_RE.match((yyyymm or "").strip())
    if not match:
        raise InvalidRange(f"Invalid month '{yyyymm}'; expected YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12 or year < 1:
        raise InvalidRange(f"Invalid month '{yyyymm}'; expected YYYY-MM")
    last_day = calendar.monthrange(year, month)[1]
    return f"{year:04d}-{month:02d}", date(year, month, 1), date(year, month, last_day)
