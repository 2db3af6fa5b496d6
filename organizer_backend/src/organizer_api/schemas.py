from __future__ import annotations

from datetime import datetime
from typing import Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .utils import DateInput, parse_datetime

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for wire models: snake_case in Python, camelCase in JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# PUBLIC_INTERFACE
class AssignmentCreate(CamelModel):
    """
    Input for creating an assignment.

    Fields are typed but optional here; required-ness, ranges and lengths are
    checked by the assignment service so that every problem is reported at once.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Write lab report",
                "subject": "Chemistry",
                "description": "Titration experiment",
                "dueDate": "2025-03-14T17:00:00Z",
                "priority": "high",
                "estimatedHours": 3,
                "tags": ["lab", "report"],
            }
        },
    )

    title: Optional[str] = Field(default=None, description="Short title, 1..200 characters")
    description: Optional[str] = Field(default=None, description="Optional details, up to 1000 characters")
    subject: Optional[str] = Field(default=None, description="Course or subject, 1..100 characters")
    due_date: Optional[datetime] = Field(
        default=None,
        description="Due date/time. Accepts ISO8601 date or datetime; dates are set to 00:00 UTC",
    )
    priority: Optional[str] = Field(default=None, description="low, medium (default) or high")
    estimated_hours: Optional[float] = Field(default=None, description="Estimated effort in hours (> 0)")
    tags: Optional[List[str]] = Field(default=None, description="Up to 20 tags of at most 50 characters")

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DateInput]) -> Optional[datetime]:
        """
        Normalize due_date from str/date/datetime to an aware datetime.
        """
        return parse_datetime(v)


# PUBLIC_INTERFACE
class AssignmentUpdate(CamelModel):
    """
    Patch for an existing assignment.
    Only fields present in the payload are applied (see ``model_fields_set``).
    """

    title: Optional[str] = Field(default=None, description="Short title, 1..200 characters")
    description: Optional[str] = Field(default=None, description="Optional details")
    subject: Optional[str] = Field(default=None, description="Course or subject")
    due_date: Optional[datetime] = Field(default=None, description="Due date/time (ISO8601)")
    priority: Optional[str] = Field(default=None, description="low, medium or high")
    status: Optional[str] = Field(default=None, description="not-started, in-progress, completed or overdue")
    estimated_hours: Optional[float] = Field(default=None, description="Estimated effort in hours (> 0)")
    actual_hours: Optional[float] = Field(default=None, description="Hours actually spent (>= 0); null clears it")
    tags: Optional[List[str]] = Field(default=None, description="Replacement tag list")

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DateInput]) -> Optional[datetime]:
        return parse_datetime(v)


class StatusUpdate(CamelModel):
    status: str = Field(..., description="New status value")


# PUBLIC_INTERFACE
class AssignmentOut(CamelModel):
    """
    Assignment as returned by the API.
    """

    id: str = Field(..., description="Unique identifier of the assignment")
    title: str
    description: str = ""
    subject: str
    due_date: datetime
    priority: str
    status: str
    estimated_hours: float
    actual_hours: Optional[float] = None
    tags: List[str] = Field(default_factory=list)
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


# PUBLIC_INTERFACE
class NoteCreate(CamelModel):
    """
    Input for creating a note. Required-ness and lengths are checked by the note service.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Lecture 4: Kinetics",
                "content": "Rate laws, half-lives, Arrhenius equation.",
                "subject": "Chemistry",
                "tags": ["lecture"],
                "assignmentId": None,
            }
        },
    )

    title: Optional[str] = Field(default=None, description="Title, 1..200 characters")
    content: Optional[str] = Field(default=None, description="Body, 1..10000 characters")
    subject: Optional[str] = Field(default=None, description="Course or subject, 1..100 characters")
    tags: Optional[List[str]] = Field(default=None, description="Up to 20 tags of at most 50 characters")
    assignment_id: Optional[str] = Field(default=None, description="Optional id of a related assignment")


class NoteUpdate(CamelModel):
    """
    Patch for an existing note; only fields present in the payload are applied.
    """

    title: Optional[str] = None
    content: Optional[str] = None
    subject: Optional[str] = None
    tags: Optional[List[str]] = None
    assignment_id: Optional[str] = None


# PUBLIC_INTERFACE
class NoteOut(CamelModel):
    id: str = Field(..., description="Unique identifier of the note")
    title: str
    content: str
    subject: str
    tags: List[str] = Field(default_factory=list)
    assignment_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    last_accessed_at: datetime


class AssignmentStats(CamelModel):
    total: int = 0
    not_started: int = 0
    in_progress: int = 0
    completed: int = 0
    overdue: int = 0
    total_estimated_hours: float = 0.0
    total_actual_hours: float = 0.0


class NoteStats(CamelModel):
    total: int = 0
    by_subject: Dict[str, int] = Field(default_factory=dict)
    total_tags: int = 0
    unique_tags: int = 0
    average_content_length: int = 0


class CombinedStats(CamelModel):
    assignments: AssignmentStats
    notes: NoteStats
    counts: Dict[str, int]


class PaginationMeta(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class Envelope(BaseModel, Generic[T]):
    """
    Uniform success wrapper for every endpoint.
    """

    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


class PageEnvelope(BaseModel, Generic[T]):
    """
    Success wrapper for paginated list responses.
    """

    success: bool = True
    data: List[T] = Field(default_factory=list)
    pagination: PaginationMeta
    message: Optional[str] = None
