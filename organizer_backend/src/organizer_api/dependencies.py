"""FastAPI dependency wiring: settings -> Database -> services."""

from __future__ import annotations

from fastapi import Depends

from .assignments import AssignmentService
from .notes import NoteService
from .settings import get_settings
from .store import Database, get_database


# PUBLIC_INTERFACE
def get_assignment_service(db: Database = Depends(get_database)) -> AssignmentService:
    """Provide an AssignmentService bound to the configured assignments file."""
    return AssignmentService(
        db.assignments,
        transition_policy=get_settings().status_transition_policy,
    )


# PUBLIC_INTERFACE
def get_note_service(db: Database = Depends(get_database)) -> NoteService:
    """Provide a NoteService bound to the configured notes file."""
    return NoteService(db.notes)
