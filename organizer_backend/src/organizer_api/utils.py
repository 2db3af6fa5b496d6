from __future__ import annotations

import math
import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Union

DateInput = Union[date, datetime, str]


def generate_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
def parse_datetime(value: Optional[DateInput]) -> Optional[datetime]:
    """
    Normalize date input into a timezone-aware UTC datetime.
    - If value is a string, parse via datetime.fromisoformat; a bare date means 00:00.
    - If value is a date (not datetime), convert to datetime at 00:00.
    - Naive datetimes are taken to be UTC; aware ones are converted to UTC.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        s = value.strip()
        # fromisoformat on older interpreters does not accept a trailing 'Z'
        if s.endswith("Z") or s.endswith("z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            try:
                d = date.fromisoformat(s)
            except ValueError as e:
                raise ValueError(
                    "Invalid date format. Use ISO8601 date or datetime string "
                    "(e.g., '2025-01-31' or '2025-01-31T13:45:00Z')."
                ) from e
            dt = datetime(d.year, d.month, d.day)
    else:
        raise ValueError("Invalid type for date; expected date, datetime, or ISO8601 string.")

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


# PUBLIC_INTERFACE
def paginate(items: Sequence[Any], page: int, limit: int) -> Dict[str, Any]:
    """
    Slice an already filtered and sorted sequence into one page.

    Args:
        items: All items matching the query, in final order.
        page: 1-based page number.
        limit: Page size.

    Returns:
        Dict with keys: data, pagination (page, limit, total, totalPages, hasNext, hasPrev).
    """
    page = max(int(page), 1)
    limit = max(int(limit), 1)
    total = len(items)
    total_pages = math.ceil(total / limit) if total else 0

    start = (page - 1) * limit
    data: List[Any] = list(items[start:start + limit])
    return {
        "data": data,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": total_pages,
            "hasNext": page < total_pages,
            "hasPrev": page > 1,
        },
    }
