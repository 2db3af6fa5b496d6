from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from .errors import ConflictError, FieldError
from .models import (
    COMPLETED,
    IN_PROGRESS,
    NOT_STARTED,
    OVERDUE,
    STATUSES,
    AssignmentEntity,
)
from .queries import (
    ASSIGNMENT_SORT_FIELDS,
    MAX_PAGE_SIZE,
    AssignmentListQuery,
    contains,
    sort_items,
    tags_intersect,
)
from .schemas import AssignmentCreate, AssignmentStats, AssignmentUpdate
from .store import JsonRecordStore, Record
from .utils import generate_id, paginate, parse_datetime, to_iso, utc_now
from .validation import (
    choice,
    raise_for_errors,
    validate_assignment_create,
    validate_assignment_update,
)

logger = logging.getLogger(__name__)

UPCOMING_WINDOW = timedelta(days=7)

# Manual status changes allowed under the "strict" policy. Setting the current
# status again is always allowed; "overdue" is only ever derived. Leaving
# overdue for anything but completed sticks only when the same update moves the
# due date into the future; otherwise the returned status is derived as overdue.
STATUS_TRANSITIONS: Dict[str, frozenset] = {
    NOT_STARTED: frozenset({IN_PROGRESS, COMPLETED}),
    IN_PROGRESS: frozenset({NOT_STARTED, COMPLETED}),
    COMPLETED: frozenset({IN_PROGRESS, NOT_STARTED}),
    OVERDUE: frozenset({IN_PROGRESS, COMPLETED}),
}

# entity field -> JSON record key
_RECORD_KEYS = {
    "id": "id",
    "title": "title",
    "description": "description",
    "subject": "subject",
    "due_date": "dueDate",
    "priority": "priority",
    "status": "status",
    "estimated_hours": "estimatedHours",
    "actual_hours": "actualHours",
    "tags": "tags",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}
_DATE_FIELDS = {"due_date", "created_at", "updated_at"}


# PUBLIC_INTERFACE
def derive_status(due_date: datetime, status: str, now: datetime) -> str:
    """
    Effective status of an assignment at ``now``.

    completed never changes; anything else past its due date is overdue.
    """
    if status == COMPLETED:
        return COMPLETED
    if due_date < now:
        return OVERDUE
    return status


def _record_to_entity(record: Record) -> AssignmentEntity:
    actual = record.get("actualHours")
    return {
        "id": str(record["id"]),
        "title": record["title"],
        "description": record.get("description") or "",
        "subject": record["subject"],
        "due_date": parse_datetime(record["dueDate"]),  # type: ignore[typeddict-item]
        "priority": record.get("priority", "medium"),
        "status": record.get("status", NOT_STARTED),
        "estimated_hours": record["estimatedHours"],
        "actual_hours": actual,
        "tags": list(record.get("tags") or []),
        "created_at": parse_datetime(record["createdAt"]),  # type: ignore[typeddict-item]
        "updated_at": parse_datetime(record["updatedAt"]),  # type: ignore[typeddict-item]
    }


def _to_record_values(values: Dict[str, Any]) -> Record:
    """Convert entity-keyed values into their JSON record form."""
    record: Record = {}
    for name, value in values.items():
        if name in _DATE_FIELDS:
            value = to_iso(value)
        record[_RECORD_KEYS[name]] = value
    return record


def _entity_to_record(entity: AssignmentEntity) -> Record:
    values: Dict[str, Any] = dict(entity)
    if values.get("actual_hours") is None:
        values.pop("actual_hours", None)
    return _to_record_values(values)


def _matches(entity: AssignmentEntity, term: str) -> bool:
    return (
        contains(entity["title"], term)
        or contains(entity["description"], term)
        or contains(entity["subject"], term)
        or any(contains(tag, term) for tag in entity["tags"])
    )


class AssignmentService:
    """
    Assignment lifecycle and queries on top of a JsonRecordStore.

    Overdue status is derived on read: every read that finds a record whose
    stored status is out of date writes the corrected status back.
    """

    def __init__(
        self,
        store: JsonRecordStore,
        clock: Callable[[], datetime] = utc_now,
        transition_policy: str = "strict",
    ) -> None:
        self._store = store
        self._clock = clock
        self._transition_policy = transition_policy

    def _now(self) -> datetime:
        return self._clock()

    # --- lifecycle ---

    def create(self, data: AssignmentCreate) -> AssignmentEntity:
        """Validate and persist a new assignment. Raises ValidationError or ConflictError."""
        raise_for_errors(validate_assignment_create(data))

        title = data.title.strip()  # type: ignore[union-attr]
        subject = data.subject.strip()  # type: ignore[union-attr]

        with self._store.locked():
            for record in self._store.read_all():
                if (
                    str(record.get("title", "")).strip().lower() == title.lower()
                    and str(record.get("subject", "")).strip().lower() == subject.lower()
                ):
                    raise ConflictError(f'Assignment "{title}" already exists in {subject}')

            now = self._now()
            entity: AssignmentEntity = {
                "id": generate_id(),
                "title": title,
                "description": (data.description or "").strip(),
                "subject": subject,
                "due_date": data.due_date,  # type: ignore[typeddict-item]
                "priority": data.priority or "medium",
                "status": NOT_STARTED,
                "estimated_hours": data.estimated_hours,  # type: ignore[typeddict-item]
                "actual_hours": None,
                "tags": list(data.tags or []),
                "created_at": now,
                "updated_at": now,
            }
            self._store.create(_entity_to_record(entity))

        logger.info("Created assignment %s (%s)", entity["id"], entity["title"])
        return entity

    def get_all(self) -> List[AssignmentEntity]:
        return [_record_to_entity(r) for r in self._sync_statuses()]

    def get_by_id(self, assignment_id: str) -> Optional[AssignmentEntity]:
        with self._store.locked():
            record = self._store.find_by_id(assignment_id)
            if record is None:
                return None

            return self._settle(_record_to_entity(record), self._now())

    def update_by_id(self, assignment_id: str, data: AssignmentUpdate) -> Optional[AssignmentEntity]:
        """
        Apply the fields present in ``data``. Returns None if the id is unknown.
        The result carries the derived status, so a past-due item reads as overdue.
        """
        raise_for_errors(validate_assignment_update(data))
        present = data.model_fields_set

        with self._store.locked():
            record = self._store.find_by_id(assignment_id)
            if record is None:
                return None

            now = self._now()
            if "status" in present:
                current = _record_to_entity(record)
                self._check_transition(
                    derive_status(current["due_date"], current["status"], now), data.status  # type: ignore[arg-type]
                )

            changes: Dict[str, Any] = {}
            for name in ("title", "subject"):
                if name in present:
                    changes[name] = getattr(data, name).strip()
            if "description" in present:
                changes["description"] = (data.description or "").strip()
            for name in ("due_date", "priority", "status", "estimated_hours", "actual_hours"):
                if name in present:
                    changes[name] = getattr(data, name)
            if "tags" in present:
                changes["tags"] = list(data.tags or [])
            changes["updated_at"] = now

            updated = self._store.update_by_id(assignment_id, _to_record_values(changes))
            if updated is None:
                return None
            entity = self._settle(_record_to_entity(updated), now)

        logger.info("Updated assignment %s (%s)", assignment_id, ", ".join(sorted(present)) or "no fields")
        return entity

    def update_status(self, assignment_id: str, status: str) -> Optional[AssignmentEntity]:
        if not status:
            raise_for_errors([FieldError("status", "Status is required")])
        raise_for_errors(choice("status", status, STATUSES))

        with self._store.locked():
            record = self._store.find_by_id(assignment_id)
            if record is None:
                return None

            now = self._now()
            current = _record_to_entity(record)
            self._check_transition(derive_status(current["due_date"], current["status"], now), status)
            updated = self._store.update_by_id(
                assignment_id, _to_record_values({"status": status, "updated_at": now})
            )
            if updated is None:
                return None
            entity = self._settle(_record_to_entity(updated), now)

        logger.info("Assignment %s status -> %s", assignment_id, entity["status"])
        return entity

    def delete_by_id(self, assignment_id: str) -> bool:
        deleted = self._store.delete_by_id(assignment_id)
        if deleted:
            logger.info("Deleted assignment %s", assignment_id)
        return deleted

    # --- queries ---

    def get_by_status(self, status: str) -> List[AssignmentEntity]:
        raise_for_errors(choice("status", status, STATUSES))
        with self._store.locked():
            self._sync_statuses()
            return [_record_to_entity(r) for r in self._store.find_by({"status": status})]

    def get_by_subject(self, subject: str) -> List[AssignmentEntity]:
        with self._store.locked():
            self._sync_statuses()
            return [_record_to_entity(r) for r in self._store.find_by({"subject": subject})]

    def get_upcoming(self, include_overdue: bool = True) -> List[AssignmentEntity]:
        """
        Not-completed assignments due within the next seven days.
        Items already past due are included unless ``include_overdue`` is False.
        """
        now = self._now()
        horizon = now + UPCOMING_WINDOW
        return [
            a
            for a in self.get_all()
            if a["status"] != COMPLETED
            and a["due_date"] <= horizon
            and (include_overdue or a["due_date"] >= now)
        ]

    def get_overdue(self) -> List[AssignmentEntity]:
        now = self._now()
        return [a for a in self.get_all() if a["status"] != COMPLETED and a["due_date"] < now]

    def search(self, query: str) -> List[AssignmentEntity]:
        """Case-insensitive substring match over title, description, subject and tags."""
        term = (query or "").strip()
        if not term:
            raise_for_errors([FieldError("q", "Search query is required")])
        return [a for a in self.get_all() if _matches(a, term)]

    def get_stats(self) -> AssignmentStats:
        assignments = self.get_all()

        def count(status: str) -> int:
            return sum(1 for a in assignments if a["status"] == status)

        return AssignmentStats(
            total=len(assignments),
            not_started=count(NOT_STARTED),
            in_progress=count(IN_PROGRESS),
            completed=count(COMPLETED),
            overdue=count(OVERDUE),
            total_estimated_hours=sum(a["estimated_hours"] for a in assignments),
            total_actual_hours=sum(a["actual_hours"] or 0 for a in assignments),
        )

    def list(self, query: Optional[AssignmentListQuery] = None) -> Dict[str, Any]:
        """
        Filter, sort and paginate assignments.

        Returns {"data": [...], "pagination": {...}}.
        """
        q = query or AssignmentListQuery()
        items = self.get_all()

        if q.status:
            items = [a for a in items if a["status"] == q.status]
        if q.priority:
            items = [a for a in items if a["priority"] == q.priority]
        if q.subject:
            items = [a for a in items if contains(a["subject"], q.subject)]
        if q.tags:
            items = [a for a in items if tags_intersect(a["tags"], q.tags)]
        if q.due_after is not None:
            items = [a for a in items if a["due_date"] >= q.due_after]
        if q.due_before is not None:
            items = [a for a in items if a["due_date"] <= q.due_before]
        if q.search:
            items = [a for a in items if _matches(a, q.search)]

        field = q.sort if q.sort in ASSIGNMENT_SORT_FIELDS else "due_date"
        items = sort_items(items, field, q.descending)
        return paginate(items, q.page, min(max(q.limit, 1), MAX_PAGE_SIZE))

    # --- internals ---

    def _sync_statuses(self) -> List[Record]:
        """Bring every stored status up to date with a single batch write."""
        with self._store.locked():
            records = self._store.read_all()
            now = self._now()
            changed = False
            for record in records:
                status = record.get("status", NOT_STARTED)
                derived = derive_status(parse_datetime(record["dueDate"]), status, now)  # type: ignore[arg-type]
                if derived != status:
                    record["status"] = derived
                    record["updatedAt"] = to_iso(now)
                    changed = True
            if changed:
                self._store.write_all(records)
                logger.debug("Marked overdue assignments in %s", self._store.path.name)
            return records

    def _settle(self, entity: AssignmentEntity, now: datetime) -> AssignmentEntity:
        """Apply the derived status to ``entity``, writing it back if it changed. Call under the store lock."""
        status = derive_status(entity["due_date"], entity["status"], now)
        if status != entity["status"]:
            entity["status"] = status  # type: ignore[typeddict-item]
            entity["updated_at"] = now
            self._store.update_by_id(entity["id"], _to_record_values({"status": status, "updated_at": now}))
        return entity

    def _check_transition(self, current: str, new: str) -> None:
        if self._transition_policy == "any" or new == current:
            return
        if new not in STATUS_TRANSITIONS.get(current, frozenset()):
            raise ConflictError(f"Cannot change status from {current} to {new}")
