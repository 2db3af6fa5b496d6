from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence, Tuple

from pydantic.alias_generators import to_snake

from ..errors import FieldError, ValidationError
from ..utils import parse_datetime


# PUBLIC_INTERFACE
def parse_sort(
    sort: Optional[str],
    order: Optional[str],
    allowed: Sequence[str],
    default_field: str,
    default_descending: bool,
) -> Tuple[str, bool]:
    """
    Normalize sort/order query parameters into (field, descending).

    - sort: field name, camelCase or snake_case, optionally prefixed with '-' for descending
    - order: 'asc' or 'desc'; if provided it overrides the direction in sort
    Unknown fields fall back to the default field and direction.
    """
    raw = (sort or "").strip()
    descending = raw.startswith("-") if raw else default_descending
    field = to_snake(raw.lstrip("-")) if raw else default_field
    if field not in allowed:
        field, descending = default_field, default_descending

    if order:
        ord_norm = order.strip().lower()
        if ord_norm not in {"asc", "desc"}:
            raise ValidationError([FieldError("order", "order must be 'asc' or 'desc'")])
        descending = ord_norm == "desc"
    return field, descending


def parse_tags(raw: Optional[str]) -> Tuple[str, ...]:
    if not raw:
        return ()
    return tuple(t.strip() for t in raw.split(",") if t.strip())


def parse_date_param(name: str, raw: Optional[str]) -> Optional[datetime]:
    if raw is None or not raw.strip():
        return None
    try:
        return parse_datetime(raw)
    except ValueError:
        raise ValidationError([FieldError(name, f"{name} must be a valid ISO 8601 date")]) from None
