from datetime import datetime, timedelta, timezone

import pytest

BASE_URL = "/api/assignments/"


def iso_in(days: float) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def create_assignment_payload(
    title="Write Report",
    subject="CS",
    due_in_days=3,
    priority="high",
    estimated_hours=2,
    **extra,
):
    payload = {
        "title": title,
        "subject": subject,
        "dueDate": iso_in(due_in_days),
        "priority": priority,
        "estimatedHours": estimated_hours,
    }
    payload.update(extra)
    return payload


def assert_assignment_shape(item: dict):
    for key in [
        "id",
        "title",
        "description",
        "subject",
        "dueDate",
        "priority",
        "status",
        "estimatedHours",
        "actualHours",
        "tags",
        "createdAt",
        "updatedAt",
    ]:
        assert key in item
    assert isinstance(item["id"], str)
    assert isinstance(item["tags"], list)
    datetime.fromisoformat(item["dueDate"].replace("Z", "+00:00"))
    datetime.fromisoformat(item["createdAt"].replace("Z", "+00:00"))


@pytest.fixture
def create(client):
    def _create(**kwargs):
        res = client.post(BASE_URL, json=create_assignment_payload(**kwargs))
        assert res.status_code == 201, res.text
        return res.json()["data"]

    return _create


class TestAssignmentsCRUD:
    def test_create_assignment(self, client):
        res = client.post(BASE_URL, json=create_assignment_payload(tags=["report"]))
        assert res.status_code == 201
        body = res.json()
        assert body["success"] is True
        assert body["message"] == "Assignment created successfully"
        item = body["data"]
        assert_assignment_shape(item)
        assert item["status"] == "not-started"
        assert item["priority"] == "high"
        assert item["tags"] == ["report"]
        assert item["actualHours"] is None

    def test_create_with_date_string(self, client):
        res = client.post(BASE_URL, json=create_assignment_payload(dueDate="2099-12-25"))
        assert res.status_code == 201
        assert res.json()["data"]["dueDate"].startswith("2099-12-25T00:00:00")

    def test_create_past_due_reads_back_overdue(self, client):
        created = client.post(BASE_URL, json=create_assignment_payload(due_in_days=-1)).json()["data"]
        res = client.get(f"{BASE_URL}{created['id']}")
        assert res.status_code == 200
        assert res.json()["data"]["status"] == "overdue"

    def test_create_missing_fields(self, client):
        res = client.post(BASE_URL, json={"title": ""})
        assert res.status_code == 400
        body = res.json()
        assert body["success"] is False
        assert body["error"] == "Validation failed"
        fields = {d["field"] for d in body["details"]}
        assert {"title", "subject", "due_date", "estimated_hours"} <= fields

    def test_create_bad_types_are_400(self, client):
        res = client.post(BASE_URL, json=create_assignment_payload(estimatedHours="lots"))
        assert res.status_code == 400
        assert res.json()["success"] is False

        res = client.post(BASE_URL, json=create_assignment_payload(dueDate="next week"))
        assert res.status_code == 400

    def test_create_duplicate_conflicts(self, client, create):
        create(title="Essay")
        res = client.post(BASE_URL, json=create_assignment_payload(title="essay"))
        assert res.status_code == 409
        assert res.json()["success"] is False

    def test_get_not_found(self, client):
        res = client.get(f"{BASE_URL}does-not-exist")
        assert res.status_code == 404
        assert res.json() == {"success": False, "error": "Assignment not found"}

    def test_update_partial(self, client, create):
        item = create(description="first draft")
        res = client.put(f"{BASE_URL}{item['id']}", json={"title": "Write Report v2", "actualHours": 1})
        assert res.status_code == 200
        updated = res.json()["data"]
        assert updated["title"] == "Write Report v2"
        assert updated["description"] == "first draft"
        assert updated["actualHours"] == 1
        assert updated["createdAt"] == item["createdAt"]

    def test_update_invalid_and_missing(self, client, create):
        item = create()
        res = client.put(f"{BASE_URL}{item['id']}", json={"estimatedHours": -3})
        assert res.status_code == 400
        assert res.json()["details"][0]["field"] == "estimated_hours"

        res = client.put(f"{BASE_URL}nope", json={"title": "x"})
        assert res.status_code == 404

    def test_patch_status(self, client, create):
        item = create()
        res = client.patch(f"{BASE_URL}{item['id']}/status", json={"status": "in-progress"})
        assert res.status_code == 200
        assert res.json()["data"]["status"] == "in-progress"

        res = client.patch(f"{BASE_URL}{item['id']}/status", json={"status": "overdue"})
        assert res.status_code == 409
        assert res.json()["error"] == "Cannot change status from in-progress to overdue"

        res = client.patch(f"{BASE_URL}{item['id']}/status", json={"status": "finished"})
        assert res.status_code == 400

        res = client.patch(f"{BASE_URL}nope/status", json={"status": "completed"})
        assert res.status_code == 404

    def test_updates_on_past_due_item_match_next_read(self, client, create):
        item = create(due_in_days=-1)

        res = client.patch(f"{BASE_URL}{item['id']}/status", json={"status": "in-progress"})
        assert res.status_code == 200
        patched = res.json()["data"]["status"]
        assert patched == client.get(f"{BASE_URL}{item['id']}").json()["data"]["status"] == "overdue"

        res = client.put(f"{BASE_URL}{item['id']}", json={"title": "Renamed"})
        assert res.status_code == 200
        assert res.json()["data"]["status"] == "overdue"

        res = client.put(f"{BASE_URL}{item['id']}", json={"dueDate": iso_in(2), "status": "in-progress"})
        assert res.json()["data"]["status"] == "in-progress"
        assert client.get(f"{BASE_URL}{item['id']}").json()["data"]["status"] == "in-progress"

    def test_collection_path_without_trailing_slash(self, client):
        res = client.post("/api/assignments", json=create_assignment_payload())
        assert res.status_code == 201
        assert res.history == []

        res = client.get("/api/assignments")
        assert res.status_code == 200
        assert res.history == []
        assert res.json()["pagination"]["total"] == 1

    def test_delete(self, client, create):
        item = create()
        res = client.delete(f"{BASE_URL}{item['id']}")
        assert res.status_code == 200
        assert res.json() == {"success": True, "data": None, "message": "Assignment deleted successfully"}
        assert client.get(f"{BASE_URL}{item['id']}").status_code == 404
        assert client.delete(f"{BASE_URL}{item['id']}").status_code == 404


class TestAssignmentsQueries:
    def test_list_pagination(self, client, create):
        for i in range(23):
            create(title=f"Task {i:02d}", due_in_days=i + 1)

        res = client.get(BASE_URL, params={"page": 3, "limit": 10})
        assert res.status_code == 200
        body = res.json()
        assert [a["title"] for a in body["data"]] == ["Task 20", "Task 21", "Task 22"]
        assert body["pagination"] == {
            "page": 3,
            "limit": 10,
            "total": 23,
            "totalPages": 3,
            "hasNext": False,
            "hasPrev": True,
        }

    def test_list_empty(self, client):
        body = client.get(BASE_URL).json()
        assert body["data"] == []
        assert body["pagination"]["totalPages"] == 0
        assert body["pagination"]["hasNext"] is False

    def test_list_filters_and_sort(self, client, create):
        create(title="Alpha", subject="Biology", priority="low", tags=["lab"], due_in_days=2)
        create(title="Beta", subject="Chemistry", priority="high", tags=["exam"], due_in_days=5)
        create(title="Gamma", subject="Biochemistry", priority="medium", tags=["lab"], due_in_days=9)

        def titles(**params):
            return [a["title"] for a in client.get(BASE_URL, params=params).json()["data"]]

        assert titles() == ["Alpha", "Beta", "Gamma"]
        assert titles(sort="-dueDate") == ["Gamma", "Beta", "Alpha"]
        assert titles(sort="priority", order="desc") == ["Beta", "Gamma", "Alpha"]
        assert titles(subject="chem") == ["Beta", "Gamma"]
        assert titles(tags="LAB") == ["Alpha", "Gamma"]
        assert titles(priority="high") == ["Beta"]
        assert titles(status="not-started") == ["Alpha", "Beta", "Gamma"]
        assert titles(q="bio") == ["Alpha", "Gamma"]
        assert titles(due_after=iso_in(4), due_before=iso_in(6)) == ["Beta"]

    def test_list_bad_params(self, client):
        assert client.get(BASE_URL, params={"limit": 0}).status_code == 400
        assert client.get(BASE_URL, params={"limit": 101}).status_code == 400
        assert client.get(BASE_URL, params={"order": "up"}).status_code == 400
        assert client.get(BASE_URL, params={"due_after": "whenever"}).status_code == 400
        res = client.get(BASE_URL, params={"due_after": iso_in(5), "due_before": iso_in(1)})
        assert res.status_code == 400
        assert res.json()["details"][0]["field"] == "due_before"

    def test_search(self, client, create):
        create(title="API Documentation")
        create(title="Essay", subject="History")
        res = client.get(f"{BASE_URL}search", params={"q": "doc"})
        assert res.status_code == 200
        assert [a["title"] for a in res.json()["data"]] == ["API Documentation"]

        res = client.get(f"{BASE_URL}search")
        assert res.status_code == 400

    def test_upcoming_and_overdue(self, client, create):
        create(title="Soon", due_in_days=2)
        create(title="Later", due_in_days=30)
        create(title="Late", due_in_days=-2)

        upcoming = client.get(f"{BASE_URL}upcoming").json()["data"]
        assert sorted(a["title"] for a in upcoming) == ["Late", "Soon"]

        upcoming = client.get(f"{BASE_URL}upcoming", params={"include_overdue": "false"}).json()["data"]
        assert [a["title"] for a in upcoming] == ["Soon"]

        overdue = client.get(f"{BASE_URL}overdue").json()["data"]
        assert [a["title"] for a in overdue] == ["Late"]

    def test_by_status_and_subject(self, client, create):
        create(title="One", subject="Math")
        create(title="Two", subject="Physics", due_in_days=-1)

        res = client.get(f"{BASE_URL}status/overdue")
        assert [a["title"] for a in res.json()["data"]] == ["Two"]
        assert client.get(f"{BASE_URL}status/bogus").status_code == 400

        res = client.get(f"{BASE_URL}subject/Math")
        assert [a["title"] for a in res.json()["data"]] == ["One"]

    def test_stats(self, client, create):
        first = create(title="One", estimated_hours=3)
        create(title="Two", due_in_days=-1, estimated_hours=1.5)
        client.patch(f"{BASE_URL}{first['id']}/status", json={"status": "completed"})

        res = client.get(f"{BASE_URL}stats")
        assert res.status_code == 200
        stats = res.json()["data"]
        assert stats["total"] == 2
        assert stats["completed"] == 1
        assert stats["overdue"] == 1
        assert stats["notStarted"] == 0
        assert stats["totalEstimatedHours"] == 4.5
