from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status

from ..assignments import AssignmentService
from ..dependencies import get_assignment_service
from ..envelope import success_envelope
from ..errors import FieldError, NotFoundError, ValidationError
from ..queries import ASSIGNMENT_SORT_FIELDS, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, AssignmentListQuery
from ..schemas import (
    AssignmentCreate,
    AssignmentOut,
    AssignmentStats,
    AssignmentUpdate,
    Envelope,
    PageEnvelope,
    StatusUpdate,
)
from .params import parse_date_param, parse_sort, parse_tags

router = APIRouter(
    prefix="/api/assignments",
    tags=["assignments"],
)


def _out(items: List[Dict[str, Any]]) -> List[AssignmentOut]:
    return [AssignmentOut(**item) for item in items]


# PUBLIC_INTERFACE
@router.get("/", response_model=PageEnvelope[AssignmentOut], include_in_schema=False)
@router.get(
    "",
    response_model=PageEnvelope[AssignmentOut],
    summary="List Assignments",
    description=(
        "List assignments with optional filters, sorting and pagination.\n\n"
        "Query parameters:\n"
        "- status, priority: exact match\n"
        "- subject: case-insensitive substring\n"
        "- tags: comma-separated; matches assignments sharing any tag\n"
        "- due_after, due_before: inclusive ISO8601 bounds on the due date\n"
        "- q: free-text search over title, description, subject and tags\n"
        "- sort: dueDate (default), createdAt, updatedAt, title, subject, priority, status, "
        "estimatedHours; prefix with '-' for descending\n"
        "- order: asc or desc (if provided, it overrides the direction in sort)\n"
        "- page (1-based), limit (1..100)"
    ),
)
def list_assignments(
    status_: Optional[str] = Query(None, alias="status", description="Filter by status"),
    priority: Optional[str] = Query(None, description="Filter by priority"),
    subject: Optional[str] = Query(None, description="Subject substring"),
    tags: Optional[str] = Query(None, description="Comma-separated tags"),
    due_after: Optional[str] = Query(None, description="Earliest due date (inclusive)"),
    due_before: Optional[str] = Query(None, description="Latest due date (inclusive)"),
    q: Optional[str] = Query(None, description="Search text"),
    sort: Optional[str] = Query(None, description="Sort field, '-' prefix for descending"),
    order: Optional[str] = Query(None, description="Override sort direction: 'asc' or 'desc'"),
    page: int = Query(1, ge=1, description="1-based page number"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Page size"),
    service: AssignmentService = Depends(get_assignment_service),
) -> Dict[str, Any]:
    field, descending = parse_sort(sort, order, ASSIGNMENT_SORT_FIELDS, "due_date", False)
    after = parse_date_param("due_after", due_after)
    before = parse_date_param("due_before", due_before)
    if after is not None and before is not None and before < after:
        raise ValidationError([FieldError("due_before", "due_before must be after due_after")])

    query = AssignmentListQuery(
        page=page,
        limit=limit,
        status=status_,
        priority=priority,
        subject=subject.strip() if subject else None,
        tags=parse_tags(tags),
        due_after=after,
        due_before=before,
        search=q.strip() if q else None,
        sort=field,
        descending=descending,
    )
    result = service.list(query)
    body = success_envelope(_out(result["data"]), "Assignments retrieved successfully")
    body["pagination"] = result["pagination"]
    return body


# PUBLIC_INTERFACE
@router.get("/search", response_model=Envelope[List[AssignmentOut]], summary="Search Assignments")
def search_assignments(
    q: str = Query("", description="Search text (title, description, subject, tags)"),
    service: AssignmentService = Depends(get_assignment_service),
) -> Dict[str, Any]:
    results = service.search(q)
    return success_envelope(_out(results), f"Found {len(results)} assignments matching '{q.strip()}'")


# PUBLIC_INTERFACE
@router.get("/upcoming", response_model=Envelope[List[AssignmentOut]], summary="Upcoming Assignments")
def upcoming_assignments(
    include_overdue: bool = Query(True, description="Include items whose due date has already passed"),
    service: AssignmentService = Depends(get_assignment_service),
) -> Dict[str, Any]:
    return success_envelope(
        _out(service.get_upcoming(include_overdue=include_overdue)),
        "Upcoming assignments retrieved successfully",
    )


# PUBLIC_INTERFACE
@router.get("/overdue", response_model=Envelope[List[AssignmentOut]], summary="Overdue Assignments")
def overdue_assignments(service: AssignmentService = Depends(get_assignment_service)) -> Dict[str, Any]:
    return success_envelope(_out(service.get_overdue()), "Overdue assignments retrieved successfully")


# PUBLIC_INTERFACE
@router.get("/stats", response_model=Envelope[AssignmentStats], summary="Assignment Statistics")
def assignment_stats(service: AssignmentService = Depends(get_assignment_service)) -> Dict[str, Any]:
    return success_envelope(service.get_stats(), "Assignment statistics retrieved successfully")


# PUBLIC_INTERFACE
@router.get("/status/{status_value}", response_model=Envelope[List[AssignmentOut]], summary="Assignments By Status")
def assignments_by_status(
    status_value: str, service: AssignmentService = Depends(get_assignment_service)
) -> Dict[str, Any]:
    return success_envelope(_out(service.get_by_status(status_value)), "Assignments retrieved successfully")


# PUBLIC_INTERFACE
@router.get("/subject/{subject}", response_model=Envelope[List[AssignmentOut]], summary="Assignments By Subject")
def assignments_by_subject(subject: str, service: AssignmentService = Depends(get_assignment_service)) -> Dict[str, Any]:
    return success_envelope(_out(service.get_by_subject(subject)), "Assignments retrieved successfully")


# PUBLIC_INTERFACE
@router.get(
    "/{assignment_id}",
    response_model=Envelope[AssignmentOut],
    summary="Get Assignment",
    responses={404: {"description": "Assignment not found"}},
)
def get_assignment(assignment_id: str, service: AssignmentService = Depends(get_assignment_service)) -> Dict[str, Any]:
    """
    Retrieve a single assignment; its status reflects the current time.
    """
    item = service.get_by_id(assignment_id)
    if item is None:
        raise NotFoundError("Assignment", assignment_id)
    return success_envelope(AssignmentOut(**item), "Assignment retrieved successfully")


# PUBLIC_INTERFACE
@router.post(
    "/", response_model=Envelope[AssignmentOut], status_code=status.HTTP_201_CREATED, include_in_schema=False
)
@router.post(
    "",
    response_model=Envelope[AssignmentOut],
    status_code=status.HTTP_201_CREATED,
    summary="Create Assignment",
    responses={
        201: {"description": "Assignment created successfully"},
        400: {"description": "Validation error"},
        409: {"description": "An assignment with this title already exists in the subject"},
    },
)
def create_assignment(
    payload: AssignmentCreate, service: AssignmentService = Depends(get_assignment_service)
) -> Dict[str, Any]:
    created = service.create(payload)
    return success_envelope(AssignmentOut(**created), "Assignment created successfully")


# PUBLIC_INTERFACE
@router.put(
    "/{assignment_id}",
    response_model=Envelope[AssignmentOut],
    summary="Update Assignment",
    description="Partially update an assignment; fields left out of the body keep their values.",
    responses={404: {"description": "Assignment not found"}},
)
def update_assignment(
    assignment_id: str,
    payload: AssignmentUpdate,
    service: AssignmentService = Depends(get_assignment_service),
) -> Dict[str, Any]:
    updated = service.update_by_id(assignment_id, payload)
    if updated is None:
        raise NotFoundError("Assignment", assignment_id)
    return success_envelope(AssignmentOut(**updated), "Assignment updated successfully")


# PUBLIC_INTERFACE
@router.patch(
    "/{assignment_id}/status",
    response_model=Envelope[AssignmentOut],
    summary="Update Assignment Status",
    responses={404: {"description": "Assignment not found"}, 409: {"description": "Transition not allowed"}},
)
def update_assignment_status(
    assignment_id: str,
    payload: StatusUpdate,
    service: AssignmentService = Depends(get_assignment_service),
) -> Dict[str, Any]:
    updated = service.update_status(assignment_id, payload.status)
    if updated is None:
        raise NotFoundError("Assignment", assignment_id)
    return success_envelope(AssignmentOut(**updated), "Assignment status updated successfully")


# PUBLIC_INTERFACE
@router.delete(
    "/{assignment_id}",
    summary="Delete Assignment",
    responses={404: {"description": "Assignment not found"}},
)
def delete_assignment(assignment_id: str, service: AssignmentService = Depends(get_assignment_service)) -> Dict[str, Any]:
    if not service.delete_by_id(assignment_id):
        raise NotFoundError("Assignment", assignment_id)
    return success_envelope(None, "Assignment deleted successfully")
