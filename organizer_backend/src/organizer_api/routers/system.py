from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..assignments import AssignmentService
from ..dependencies import get_assignment_service, get_note_service
from ..envelope import success_envelope
from ..notes import NoteService
from ..schemas import CombinedStats, Envelope
from ..settings import get_settings
from ..store import Database, get_database
from ..utils import utc_now

API_NAME = "Academic Organizer API"
API_VERSION = "1.0.0"

router = APIRouter(prefix="/api", tags=["system"])


# PUBLIC_INTERFACE
@router.get("/health", summary="Health Check")
def health_check() -> Dict[str, Any]:
    """
    Health check endpoint.

    Returns:
        An envelope with the service status, server time and environment name.
    """
    return success_envelope(
        {"status": "healthy", "timestamp": utc_now().isoformat(), "environment": get_settings().app_env},
        "API is healthy",
    )


# PUBLIC_INTERFACE
@router.get("", summary="API Info")
def api_info() -> Dict[str, Any]:
    return success_envelope(
        {
            "name": API_NAME,
            "version": API_VERSION,
            "endpoints": {
                "assignments": "/api/assignments",
                "notes": "/api/notes",
                "stats": "/api/stats",
                "health": "/api/health",
            },
        },
        API_NAME,
    )


# PUBLIC_INTERFACE
@router.get("/stats", response_model=Envelope[CombinedStats], summary="Dashboard Statistics")
def dashboard_stats(
    assignments: AssignmentService = Depends(get_assignment_service),
    notes: NoteService = Depends(get_note_service),
    db: Database = Depends(get_database),
) -> Dict[str, Any]:
    """
    Combined assignment and note statistics plus raw record counts.
    """
    stats = CombinedStats(
        assignments=assignments.get_stats(),
        notes=notes.get_stats(),
        counts=db.counts(),
    )
    return success_envelope(stats, "Statistics retrieved successfully")


# PUBLIC_INTERFACE
@router.post("/backup", summary="Back Up Data Files")
def backup(db: Database = Depends(get_database)) -> Dict[str, Any]:
    paths = db.backup()
    return success_envelope({"files": [str(p) for p in paths]}, "Database backed up successfully")
