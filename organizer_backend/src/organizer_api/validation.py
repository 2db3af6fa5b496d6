"""
Field checks for assignment and note input.

Each check returns a list of FieldError (empty when the value is fine); the
entity-level functions compose them so that all problems with one payload are
reported together.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, List, Optional, Sequence

from .errors import FieldError, ValidationError
from .models import PRIORITIES, STATUSES
from .schemas import AssignmentCreate, AssignmentUpdate, NoteCreate, NoteUpdate

TITLE_MAX = 200
SUBJECT_MAX = 100
DESCRIPTION_MAX = 1000
CONTENT_MAX = 10000
MAX_TAGS = 20
TAG_MAX = 50
HOURS_MAX = 1000


def _label(field: str) -> str:
    return field.replace("_", " ").capitalize()


def required_text(field: str, value: Optional[str], max_length: int) -> List[FieldError]:
    if value is None or not value.strip():
        return [FieldError(field, f"{_label(field)} is required")]
    return max_length_text(field, value, max_length)


def max_length_text(field: str, value: Optional[str], max_length: int) -> List[FieldError]:
    if value is not None and len(value.strip()) > max_length:
        return [FieldError(field, f"{_label(field)} must be {max_length:,} characters or less")]
    return []


def tags(value: Optional[Sequence[Any]], field: str = "tags") -> List[FieldError]:
    if value is None:
        return []
    errors: List[FieldError] = []
    if len(value) > MAX_TAGS:
        errors.append(FieldError(field, f"Cannot have more than {MAX_TAGS} tags"))
    if any(not isinstance(tag, str) or len(tag) > TAG_MAX for tag in value):
        errors.append(FieldError(field, f"Each tag must be a string with max {TAG_MAX} characters"))
    return errors


def hours(field: str, value: Optional[float], allow_zero: bool) -> List[FieldError]:
    if value is None:
        return []
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return [FieldError(field, f"{_label(field)} must be a number")]
    if allow_zero and value < 0:
        return [FieldError(field, f"{_label(field)} cannot be negative")]
    if not allow_zero and value <= 0:
        return [FieldError(field, f"{_label(field)} must be a positive number")]
    if value > HOURS_MAX:
        return [FieldError(field, f"{_label(field)} must not exceed {HOURS_MAX}")]
    return []


def choice(field: str, value: Optional[str], allowed: Iterable[str]) -> List[FieldError]:
    allowed = tuple(allowed)
    if value is not None and value not in allowed:
        return [FieldError(field, f"{_label(field)} must be one of: {', '.join(allowed)}")]
    return []


# PUBLIC_INTERFACE
def validate_assignment_create(data: AssignmentCreate) -> List[FieldError]:
    errors: List[FieldError] = []
    errors += required_text("title", data.title, TITLE_MAX)
    errors += required_text("subject", data.subject, SUBJECT_MAX)
    errors += max_length_text("description", data.description, DESCRIPTION_MAX)
    if data.due_date is None:
        errors.append(FieldError("due_date", "Due date is required"))
    if data.estimated_hours is None:
        errors.append(FieldError("estimated_hours", "Estimated hours is required"))
    errors += hours("estimated_hours", data.estimated_hours, allow_zero=False)
    errors += choice("priority", data.priority, PRIORITIES)
    errors += tags(data.tags)
    return errors


# PUBLIC_INTERFACE
def validate_assignment_update(data: AssignmentUpdate) -> List[FieldError]:
    """Check only the fields present in the patch."""
    present = data.model_fields_set
    errors: List[FieldError] = []
    if "title" in present:
        errors += required_text("title", data.title, TITLE_MAX)
    if "subject" in present:
        errors += required_text("subject", data.subject, SUBJECT_MAX)
    if "description" in present:
        errors += max_length_text("description", data.description, DESCRIPTION_MAX)
    if "due_date" in present and data.due_date is None:
        errors.append(FieldError("due_date", "Due date cannot be empty"))
    if "estimated_hours" in present:
        if data.estimated_hours is None:
            errors.append(FieldError("estimated_hours", "Estimated hours cannot be empty"))
        errors += hours("estimated_hours", data.estimated_hours, allow_zero=False)
    if "actual_hours" in present:
        errors += hours("actual_hours", data.actual_hours, allow_zero=True)
    if "priority" in present:
        if data.priority is None:
            errors.append(FieldError("priority", "Priority cannot be empty"))
        errors += choice("priority", data.priority, PRIORITIES)
    if "status" in present:
        if data.status is None:
            errors.append(FieldError("status", "Status cannot be empty"))
        errors += choice("status", data.status, STATUSES)
    if "tags" in present:
        errors += tags(data.tags)
    return errors


# PUBLIC_INTERFACE
def validate_note_create(data: NoteCreate) -> List[FieldError]:
    errors: List[FieldError] = []
    errors += required_text("title", data.title, TITLE_MAX)
    errors += required_text("content", data.content, CONTENT_MAX)
    errors += required_text("subject", data.subject, SUBJECT_MAX)
    errors += tags(data.tags)
    return errors


# PUBLIC_INTERFACE
def validate_note_update(data: NoteUpdate) -> List[FieldError]:
    present = data.model_fields_set
    errors: List[FieldError] = []
    if "title" in present:
        errors += required_text("title", data.title, TITLE_MAX)
    if "content" in present:
        errors += required_text("content", data.content, CONTENT_MAX)
    if "subject" in present:
        errors += required_text("subject", data.subject, SUBJECT_MAX)
    if "tags" in present:
        errors += tags(data.tags)
    return errors


def raise_for_errors(errors: Sequence[FieldError]) -> None:
    if errors:
        raise ValidationError(errors)
