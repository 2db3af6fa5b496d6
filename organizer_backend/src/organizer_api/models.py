from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional, TypedDict

Priority = Literal["low", "medium", "high"]
AssignmentStatus = Literal["not-started", "in-progress", "completed", "overdue"]

PRIORITIES = ("low", "medium", "high")
STATUSES = ("not-started", "in-progress", "completed", "overdue")

NOT_STARTED = "not-started"
IN_PROGRESS = "in-progress"
COMPLETED = "completed"
OVERDUE = "overdue"


# PUBLIC_INTERFACE
class AssignmentEntity(TypedDict):
    """
    In-memory form of an assignment record.

    The JSON file stores the same fields with camelCase keys and ISO8601 strings;
    the assignment service converts between the two.

    Fields:
    - id: Opaque unique identifier, never changes
    - title: 1..200 chars, trimmed
    - description: Free text, '' when not given
    - subject: 1..100 chars, trimmed
    - due_date: Aware UTC datetime
    - priority: low | medium | high
    - status: not-started | in-progress | completed | overdue
    - estimated_hours: Positive number
    - actual_hours: Optional non-negative number
    - tags: Up to 20 strings of at most 50 chars
    - created_at / updated_at: Set by the service, never by callers
    """

    id: str
    title: str
    description: str
    subject: str
    due_date: datetime
    priority: Priority
    status: AssignmentStatus
    estimated_hours: float
    actual_hours: Optional[float]
    tags: List[str]
    created_at: datetime
    updated_at: datetime


# PUBLIC_INTERFACE
class NoteEntity(TypedDict):
    """
    In-memory form of a note record.

    assignment_id is a weak link to an assignment: it is neither checked on write
    nor cleared when the assignment goes away.
    """

    id: str
    title: str
    content: str
    subject: str
    tags: List[str]
    assignment_id: Optional[str]
    created_at: datetime
    updated_at: datetime
    last_accessed_at: datetime
