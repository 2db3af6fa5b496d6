from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from organizer_api.assignments import AssignmentService
from organizer_api.main import app
from organizer_api.notes import NoteService
from organizer_api.store import Database, get_database

BASE_TIME = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = BASE_TIME) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def database(tmp_path):
    db = Database(tmp_path / "data")
    db.initialize()
    return db


@pytest.fixture
def assignment_service(database, clock):
    return AssignmentService(database.assignments, clock=clock)


@pytest.fixture
def note_service(database, clock):
    return NoteService(database.notes, clock=clock)


@pytest.fixture
def client(database):
    app.dependency_overrides[get_database] = lambda: database
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
