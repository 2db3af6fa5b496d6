from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Generator, List, Mapping, Optional, Union

from .errors import InternalError
from .settings import get_settings
from .utils import utc_now

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

ASSIGNMENTS_FILE = "assignments.json"
NOTES_FILE = "notes.json"
DATA_FILE_MODE = 0o644


class JsonRecordStore:
    """
    Persistence for one entity type as a JSON array in a single file.

    Every mutation reads the whole file, changes the list in memory and rewrites
    the whole file. A re-entrant lock serializes those read-modify-write cycles
    within this process; callers that need several operations to act as one
    (read, decide, write) hold ``locked()`` around them.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)
        self._lock = RLock()

    @property
    def path(self) -> Path:
        return self._path

    @contextmanager
    def locked(self) -> Generator[None, None, None]:
        with self._lock:
            yield

    def read_all(self) -> List[Record]:
        """
        Return every record in the file.

        Never raises: a missing, unreadable or malformed file reads as an empty list.
        """
        with self._lock:
            try:
                with open(self._path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except FileNotFoundError:
                return []
            except (OSError, ValueError) as e:
                logger.error("Error reading %s: %s", self._path, e)
                return []

            if not isinstance(data, list):
                logger.error("Error reading %s: expected a JSON array, got %s", self._path, type(data).__name__)
                return []
            if not all(isinstance(item, dict) for item in data):
                logger.error("Error reading %s: every array element must be a JSON object", self._path)
                return []
            return data

    def write_all(self, records: List[Record]) -> None:
        """Replace the file contents with ``records``."""
        with self._lock:
            tmp_path: Optional[str] = None
            try:
                payload = json.dumps(records, indent=2, ensure_ascii=False)
                self._path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_path = tempfile.mkstemp(
                    prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
                )
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                # mkstemp creates the file owner-only
                os.chmod(tmp_path, DATA_FILE_MODE)
                os.replace(tmp_path, self._path)
                tmp_path = None
            except (OSError, TypeError, ValueError) as e:
                logger.error("Error writing %s: %s", self._path, e)
                raise InternalError(f"Failed to write {self._path.name}") from e
            finally:
                if tmp_path is not None and os.path.exists(tmp_path):
                    os.unlink(tmp_path)

    def find_by_id(self, record_id: str, id_field: str = "id") -> Optional[Record]:
        for record in self.read_all():
            if record.get(id_field) == record_id:
                return record
        return None

    def find_by(self, criteria: Mapping[str, Any]) -> List[Record]:
        """Return records where every criteria key is present and exactly equal."""
        return [
            record
            for record in self.read_all()
            if all(key in record and record[key] == value for key, value in criteria.items())
        ]

    def create(self, record: Record) -> Record:
        with self._lock:
            records = self.read_all()
            records.append(record)
            self.write_all(records)
            return record

    def update_by_id(self, record_id: str, updates: Mapping[str, Any], id_field: str = "id") -> Optional[Record]:
        """Shallow-merge ``updates`` into the matching record. Returns None if not found."""
        with self._lock:
            records = self.read_all()
            for index, record in enumerate(records):
                if record.get(id_field) == record_id:
                    merged = {**record, **updates}
                    records[index] = merged
                    self.write_all(records)
                    return merged
            return None

    def delete_by_id(self, record_id: str, id_field: str = "id") -> bool:
        with self._lock:
            records = self.read_all()
            remaining = [r for r in records if r.get(id_field) != record_id]
            if len(remaining) == len(records):
                return False
            self.write_all(remaining)
            return True

    def count(self) -> int:
        return len(self.read_all())


class Database:
    """The pair of record stores backing the organizer, rooted at one data directory."""

    def __init__(self, data_dir: Union[str, Path]) -> None:
        self.data_dir = Path(data_dir)
        self.assignments = JsonRecordStore(self.data_dir / ASSIGNMENTS_FILE)
        self.notes = JsonRecordStore(self.data_dir / NOTES_FILE)

    def _stores(self) -> List[JsonRecordStore]:
        return [self.assignments, self.notes]

    def initialize(self) -> None:
        """Create the data directory and seed missing files with an empty array."""
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Failed to initialize database at %s: %s", self.data_dir, e)
            raise InternalError("Failed to initialize database") from e

        for store in self._stores():
            if not store.path.exists():
                store.write_all([])
                logger.info("Created %s", store.path.name)
        logger.info("Database initialized at %s", self.data_dir)

    def backup(self, backup_dir: Optional[Union[str, Path]] = None) -> List[Path]:
        """Copy both data files into ``backup_dir`` (default ``<data_dir>/backups``)."""
        stamp = utc_now().isoformat().replace(":", "-").replace(".", "-")
        target_dir = Path(backup_dir) if backup_dir is not None else self.data_dir / "backups"
        written: List[Path] = []
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            for store in self._stores():
                with store.locked():
                    if not store.path.exists():
                        store.write_all([])
                    dest = target_dir / f"{store.path.stem}-{stamp}.json"
                    shutil.copyfile(store.path, dest)
                written.append(dest)
        except OSError as e:
            logger.error("Backup to %s failed: %s", target_dir, e)
            raise InternalError("Failed to back up database") from e

        logger.info("Database backed up at %s", stamp)
        return written

    def clear_all(self) -> None:
        for store in self._stores():
            store.write_all([])
        logger.info("All database data cleared")

    def counts(self) -> Dict[str, int]:
        return {
            "assignments": self.assignments.count(),
            "notes": self.notes.count(),
        }


@lru_cache(maxsize=None)
def _database_for(data_dir: str) -> Database:
    db = Database(data_dir)
    db.initialize()
    return db


# PUBLIC_INTERFACE
def get_database() -> Database:
    """
    Return the process-wide Database for the configured data directory.

    One instance per directory so that every request shares the same store locks.
    """
    return _database_for(os.path.abspath(get_settings().data_dir))
