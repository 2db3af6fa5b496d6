from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_note_service
from ..envelope import success_envelope
from ..errors import NotFoundError
from ..notes import NoteService
from ..queries import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, NOTE_SORT_FIELDS, NoteListQuery
from ..schemas import Envelope, NoteCreate, NoteOut, NoteStats, NoteUpdate, PageEnvelope
from .params import parse_sort, parse_tags

router = APIRouter(
    prefix="/api/notes",
    tags=["notes"],
)


def _out(items: List[Dict[str, Any]]) -> List[NoteOut]:
    return [NoteOut(**item) for item in items]


# PUBLIC_INTERFACE
@router.get("/", response_model=PageEnvelope[NoteOut], include_in_schema=False)
@router.get(
    "",
    response_model=PageEnvelope[NoteOut],
    summary="List Notes",
    description=(
        "List notes, most recently updated first.\n\n"
        "Query parameters:\n"
        "- subject: case-insensitive substring\n"
        "- assignment_id: exact match on the linked assignment\n"
        "- tags: comma-separated; matches notes sharing any tag\n"
        "- q: free-text search over title, content, subject and tags\n"
        "- sort: updatedAt (default), createdAt, lastAccessedAt, title, subject\n"
        "- order: asc or desc\n"
        "- page (1-based), limit (1..100)"
    ),
)
def list_notes(
    subject: Optional[str] = Query(None, description="Subject substring"),
    assignment_id: Optional[str] = Query(None, description="Linked assignment id"),
    tags: Optional[str] = Query(None, description="Comma-separated tags"),
    q: Optional[str] = Query(None, description="Search text"),
    sort: Optional[str] = Query(None, description="Sort field, '-' prefix for descending"),
    order: Optional[str] = Query(None, description="Override sort direction: 'asc' or 'desc'"),
    page: int = Query(1, ge=1, description="1-based page number"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Page size"),
    service: NoteService = Depends(get_note_service),
) -> Dict[str, Any]:
    field, descending = parse_sort(sort, order, NOTE_SORT_FIELDS, "updated_at", True)
    query = NoteListQuery(
        page=page,
        limit=limit,
        subject=subject.strip() if subject else None,
        assignment_id=assignment_id,
        tags=parse_tags(tags),
        search=q.strip() if q else None,
        sort=field,
        descending=descending,
    )
    result = service.list(query)
    body = success_envelope(_out(result["data"]), "Notes retrieved successfully")
    body["pagination"] = result["pagination"]
    return body


# PUBLIC_INTERFACE
@router.get("/search", response_model=Envelope[List[NoteOut]], summary="Search Notes")
def search_notes(
    q: str = Query("", description="Search text (title, content, subject, tags)"),
    service: NoteService = Depends(get_note_service),
) -> Dict[str, Any]:
    results = service.search(q)
    return success_envelope(_out(results), f"Found {len(results)} notes matching '{q.strip()}'")


# PUBLIC_INTERFACE
@router.get("/stats", response_model=Envelope[NoteStats], summary="Note Statistics")
def note_stats(service: NoteService = Depends(get_note_service)) -> Dict[str, Any]:
    return success_envelope(service.get_stats(), "Note statistics retrieved successfully")


# PUBLIC_INTERFACE
@router.get("/assignment/{assignment_id}", response_model=Envelope[List[NoteOut]], summary="Notes For Assignment")
def notes_by_assignment(assignment_id: str, service: NoteService = Depends(get_note_service)) -> Dict[str, Any]:
    return success_envelope(_out(service.get_by_assignment(assignment_id)), "Notes retrieved successfully")


# PUBLIC_INTERFACE
@router.get("/subject/{subject}", response_model=Envelope[List[NoteOut]], summary="Notes By Subject")
def notes_by_subject(subject: str, service: NoteService = Depends(get_note_service)) -> Dict[str, Any]:
    return success_envelope(_out(service.get_by_subject(subject)), "Notes retrieved successfully")


# PUBLIC_INTERFACE
@router.get(
    "/{note_id}",
    response_model=Envelope[NoteOut],
    summary="Get Note",
    description="Get a single note by ID. Reading a note updates its lastAccessedAt.",
    responses={404: {"description": "Note not found"}},
)
def get_note(note_id: str, service: NoteService = Depends(get_note_service)) -> Dict[str, Any]:
    item = service.get_by_id(note_id)
    if item is None:
        raise NotFoundError("Note", note_id)
    return success_envelope(NoteOut(**item), "Note retrieved successfully")


# PUBLIC_INTERFACE
@router.post(
    "/", response_model=Envelope[NoteOut], status_code=status.HTTP_201_CREATED, include_in_schema=False
)
@router.post(
    "",
    response_model=Envelope[NoteOut],
    status_code=status.HTTP_201_CREATED,
    summary="Create Note",
    responses={400: {"description": "Validation error"}},
)
def create_note(payload: NoteCreate, service: NoteService = Depends(get_note_service)) -> Dict[str, Any]:
    created = service.create(payload)
    return success_envelope(NoteOut(**created), "Note created successfully")


# PUBLIC_INTERFACE
@router.put(
    "/{note_id}",
    response_model=Envelope[NoteOut],
    summary="Update Note",
    responses={404: {"description": "Note not found"}},
)
def update_note(note_id: str, payload: NoteUpdate, service: NoteService = Depends(get_note_service)) -> Dict[str, Any]:
    updated = service.update_by_id(note_id, payload)
    if updated is None:
        raise NotFoundError("Note", note_id)
    return success_envelope(NoteOut(**updated), "Note updated successfully")


# PUBLIC_INTERFACE
@router.delete("/{note_id}", summary="Delete Note", responses={404: {"description": "Note not found"}})
def delete_note(note_id: str, service: NoteService = Depends(get_note_service)) -> Dict[str, Any]:
    if not service.delete_by_id(note_id):
        raise NotFoundError("Note", note_id)
    return success_envelope(None, "Note deleted successfully")
