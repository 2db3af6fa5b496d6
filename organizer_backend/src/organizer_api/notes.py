from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from .errors import FieldError
from .models import NoteEntity
from .queries import MAX_PAGE_SIZE, NOTE_SORT_FIELDS, NoteListQuery, contains, sort_items, tags_intersect
from .schemas import NoteCreate, NoteStats, NoteUpdate
from .store import JsonRecordStore, Record
from .utils import generate_id, paginate, parse_datetime, to_iso, utc_now
from .validation import raise_for_errors, validate_note_create, validate_note_update

logger = logging.getLogger(__name__)


def _record_to_entity(record: Record) -> NoteEntity:
    return {
        "id": str(record["id"]),
        "title": record["title"],
        "content": record["content"],
        "subject": record["subject"],
        "tags": list(record.get("tags") or []),
        "assignment_id": record.get("assignmentId"),
        "created_at": parse_datetime(record["createdAt"]),  # type: ignore[typeddict-item]
        "updated_at": parse_datetime(record["updatedAt"]),  # type: ignore[typeddict-item]
        "last_accessed_at": parse_datetime(  # type: ignore[typeddict-item]
            record.get("lastAccessedAt") or record["updatedAt"]
        ),
    }


def _entity_to_record(entity: NoteEntity) -> Record:
    record: Record = {
        "id": entity["id"],
        "title": entity["title"],
        "content": entity["content"],
        "subject": entity["subject"],
        "tags": entity["tags"],
        "createdAt": to_iso(entity["created_at"]),
        "updatedAt": to_iso(entity["updated_at"]),
        "lastAccessedAt": to_iso(entity["last_accessed_at"]),
    }
    if entity["assignment_id"] is not None:
        record["assignmentId"] = entity["assignment_id"]
    return record


def _matches(note: NoteEntity, term: str) -> bool:
    return (
        contains(note["title"], term)
        or contains(note["content"], term)
        or contains(note["subject"], term)
        or any(contains(tag, term) for tag in note["tags"])
    )


class NoteService:
    """Note lifecycle and queries on top of a JsonRecordStore."""

    def __init__(self, store: JsonRecordStore, clock: Callable[[], datetime] = utc_now) -> None:
        self._store = store
        self._clock = clock

    def _now(self) -> datetime:
        return self._clock()

    def create(self, data: NoteCreate) -> NoteEntity:
        raise_for_errors(validate_note_create(data))

        title = data.title.strip()  # type: ignore[union-attr]
        subject = data.subject.strip()  # type: ignore[union-attr]

        with self._store.locked():
            # Same title within a subject is allowed for notes, only reported
            for existing in self._store.find_by({"subject": subject}):
                if str(existing.get("title", "")).lower() == title.lower():
                    logger.warning('Note with similar title "%s" already exists in %s', title, subject)
                    break

            now = self._now()
            entity: NoteEntity = {
                "id": generate_id(),
                "title": title,
                "content": data.content.strip(),  # type: ignore[union-attr]
                "subject": subject,
                "tags": list(data.tags or []),
                "assignment_id": data.assignment_id,
                "created_at": now,
                "updated_at": now,
                "last_accessed_at": now,
            }
            self._store.create(_entity_to_record(entity))

        logger.info("Created note %s (%s)", entity["id"], entity["title"])
        return entity

    def get_all(self) -> List[NoteEntity]:
        return [_record_to_entity(r) for r in self._store.read_all()]

    def get_by_id(self, note_id: str) -> Optional[NoteEntity]:
        """Return the note and record the access time."""
        now = self._now()
        updated = self._store.update_by_id(note_id, {"lastAccessedAt": to_iso(now)})
        return _record_to_entity(updated) if updated is not None else None

    def update_by_id(self, note_id: str, data: NoteUpdate) -> Optional[NoteEntity]:
        raise_for_errors(validate_note_update(data))
        present = data.model_fields_set

        now = self._now()
        changes: Record = {}
        for name in ("title", "content", "subject"):
            if name in present:
                changes[name] = getattr(data, name).strip()
        if "tags" in present:
            changes["tags"] = list(data.tags or [])
        if "assignment_id" in present:
            changes["assignmentId"] = data.assignment_id
        changes["updatedAt"] = to_iso(now)
        changes["lastAccessedAt"] = to_iso(now)

        updated = self._store.update_by_id(note_id, changes)
        if updated is None:
            return None
        logger.info("Updated note %s", note_id)
        return _record_to_entity(updated)

    def delete_by_id(self, note_id: str) -> bool:
        deleted = self._store.delete_by_id(note_id)
        if deleted:
            logger.info("Deleted note %s", note_id)
        return deleted

    def get_by_assignment(self, assignment_id: str) -> List[NoteEntity]:
        return [_record_to_entity(r) for r in self._store.find_by({"assignmentId": assignment_id})]

    def get_by_subject(self, subject: str) -> List[NoteEntity]:
        return [_record_to_entity(r) for r in self._store.find_by({"subject": subject})]

    def search(self, query: str) -> List[NoteEntity]:
        term = (query or "").strip()
        if not term:
            raise_for_errors([FieldError("q", "Search query is required")])
        return [n for n in self.get_all() if _matches(n, term)]

    def get_stats(self) -> NoteStats:
        notes = self.get_all()
        by_subject: Dict[str, int] = {}
        all_tags: List[str] = []
        total_length = 0
        for note in notes:
            by_subject[note["subject"]] = by_subject.get(note["subject"], 0) + 1
            all_tags.extend(note["tags"])
            total_length += len(note["content"])

        return NoteStats(
            total=len(notes),
            by_subject=by_subject,
            total_tags=len(all_tags),
            unique_tags=len(set(all_tags)),
            average_content_length=int(total_length / len(notes) + 0.5) if notes else 0,
        )

    def list(self, query: Optional[NoteListQuery] = None) -> Dict[str, Any]:
        """
        Filter, sort and paginate notes. Most recently updated first by default.
        """
        q = query or NoteListQuery()
        items = self.get_all()

        if q.subject:
            items = [n for n in items if contains(n["subject"], q.subject)]
        if q.assignment_id:
            items = [n for n in items if n["assignment_id"] == q.assignment_id]
        if q.tags:
            items = [n for n in items if tags_intersect(n["tags"], q.tags)]
        if q.search:
            items = [n for n in items if _matches(n, q.search)]

        field = q.sort if q.sort in NOTE_SORT_FIELDS else "updated_at"
        items = sort_items(items, field, q.descending)
        return paginate(items, q.page, min(max(q.limit, 1), MAX_PAGE_SIZE))
