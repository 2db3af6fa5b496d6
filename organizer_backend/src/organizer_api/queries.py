from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

PRIORITY_RANK = {"low": 0, "medium": 1, "high": 2}


@dataclass(frozen=True)
class AssignmentListQuery:
    """
    Query parameters for listing assignments.
    """
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    status: Optional[str] = None
    priority: Optional[str] = None
    subject: Optional[str] = None  # case-insensitive substring
    tags: Tuple[str, ...] = field(default_factory=tuple)  # matches when any tag is shared
    due_after: Optional[datetime] = None  # inclusive
    due_before: Optional[datetime] = None  # inclusive
    search: Optional[str] = None
    sort: str = "due_date"  # allowed: see ASSIGNMENT_SORT_FIELDS
    descending: bool = False


@dataclass(frozen=True)
class NoteListQuery:
    """
    Query parameters for listing notes.
    """
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    subject: Optional[str] = None
    assignment_id: Optional[str] = None
    tags: Tuple[str, ...] = field(default_factory=tuple)
    search: Optional[str] = None
    sort: str = "updated_at"  # allowed: see NOTE_SORT_FIELDS
    descending: bool = True


ASSIGNMENT_SORT_FIELDS = (
    "due_date",
    "created_at",
    "updated_at",
    "title",
    "subject",
    "priority",
    "status",
    "estimated_hours",
)
NOTE_SORT_FIELDS = ("updated_at", "created_at", "last_accessed_at", "title", "subject")


def sort_key(field_name: str) -> Callable[[Dict[str, Any]], Any]:
    """
    Build a key function for entity dicts.
    - datetimes compare by epoch seconds
    - priority compares by rank (low < medium < high)
    - strings compare case-insensitively
    - missing values sort first
    """
    def key(item: Dict[str, Any]) -> Tuple[int, Any]:
        value = item.get(field_name)
        if value is None:
            return (0, 0)
        if field_name == "priority":
            return (1, PRIORITY_RANK.get(value, -1))
        if isinstance(value, datetime):
            return (1, value.timestamp())
        if isinstance(value, str):
            return (1, value.lower())
        return (1, value)

    return key


def tags_intersect(item_tags: Sequence[str], wanted: Sequence[str]) -> bool:
    wanted_lower = {t.lower() for t in wanted}
    return any(t.lower() in wanted_lower for t in item_tags)


def contains(haystack: Optional[str], needle: str) -> bool:
    return needle.lower() in (haystack or "").lower()


def sort_items(items: List[T], field_name: str, descending: bool) -> List[T]:
    return sorted(items, key=sort_key(field_name), reverse=descending)  # type: ignore[arg-type]
