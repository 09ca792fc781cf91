"""End-to-end tests for the JSON API."""

import os
import sys
from datetime import timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from planner.core.config import settings
from planner.db.session import Base, enable_sqlite_foreign_keys, get_db
from planner.main import app
from planner.services.dates import get_today


@pytest.fixture()
def client():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _project(client, name="Launch", status="planning"):
    response = client.post("/api/v1/projects", json={"name": name, "status": status})
    assert response.status_code == 201
    return response.json()


def _ticket(client, project_id, name, start="2024-03-04", end="2024-03-06", **extra):
    response = client.post(
        f"/api/v1/projects/{project_id}/tickets",
        json={"name": name, "start_date": start, "end_date": end, **extra},
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_health_and_request_id(client):
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})

    assert response.json() == {"ok": True}
    assert response.headers["X-Request-ID"] == "abc-123"


def test_tree_lists_expanded_children_under_parent(client):
    project = _project(client)
    a = _ticket(client, project["id"], "A")
    _ticket(client, project["id"], "B")
    _ticket(client, project["id"], "C", parent_id=a["id"])

    tree = client.get(f"/api/v1/projects/{project['id']}/tree").json()

    assert [(t["name"], t["level"], t["has_children"]) for t in tree["tickets"]] == [
        ("A", 0, True),
        ("C", 1, False),
        ("B", 0, False),
    ]
    assert tree["expanded"] == [a["id"]]

    collapsed = client.get(f"/api/v1/projects/{project['id']}/tree", params={"expanded": ""}).json()
    assert [t["name"] for t in collapsed["tickets"]] == ["A", "B"]
    assert collapsed["tickets"][0]["expanded"] is False


def test_timeline_places_visible_rows(client):
    project = _project(client)
    a = _ticket(client, project["id"], "A", start="2024-03-04", end="2024-03-06")
    _ticket(client, project["id"], "A1", start="2024-03-05", end="2024-03-05", parent_id=a["id"])

    layout = client.get(f"/api/v1/projects/{project['id']}/timeline").json()

    assert layout["range_start"] == "2024-03-02"
    assert layout["range_end"] == "2024-03-08"
    assert layout["total_days"] == 7
    assert layout["width"] == 7 * 40
    assert [(b["left"], b["width"], b["top"], b["is_subtask"]) for b in layout["bars"]] == [
        (80, 120, 9, False),
        (120, 40, 59, True),
    ]
    assert len(layout["days"]) == 7


def test_empty_timeline_spans_thirty_one_days(client):
    project = _project(client)

    layout = client.get(f"/api/v1/projects/{project['id']}/timeline").json()

    assert layout["total_days"] == 31
    assert layout["bars"] == []


def test_reorder_moves_dragged_ticket_before_target(client):
    project = _project(client)
    a = _ticket(client, project["id"], "A")
    b = _ticket(client, project["id"], "B")

    response = client.post(
        f"/api/v1/projects/{project['id']}/tickets/reorder",
        json={"dragged_id": b["id"], "target_id": a["id"]},
    )

    assert response.json()["changed"] is True
    tickets = client.get(f"/api/v1/projects/{project['id']}/tickets").json()
    assert {t["name"]: t["sort_order"] for t in tickets} == {"A": 1, "B": 0}

    again = client.post(
        f"/api/v1/projects/{project['id']}/tickets/reorder",
        json={"dragged_id": b["id"], "target_id": a["id"]},
    )
    assert again.json() == {"changed": False, "moved": []}


def test_gesture_preview_does_not_write_but_commit_does(client):
    project = _project(client)
    ticket = _ticket(client, project["id"], "A")
    body = {"kind": "move", "start_x": 100, "current_x": 180}

    preview = client.post(f"/api/v1/tickets/{ticket['id']}/gesture/preview", json=body).json()
    assert preview["days_moved"] == 2
    assert preview["committed"] is False
    assert preview["ticket"]["start_date"] == "2024-03-06"
    assert client.get(f"/api/v1/tickets/{ticket['id']}").json()["start_date"] == "2024-03-04"

    commit = client.post(f"/api/v1/tickets/{ticket['id']}/gesture/commit", json=body).json()
    assert commit["committed"] is True
    assert client.get(f"/api/v1/tickets/{ticket['id']}").json()["end_date"] == "2024-03-08"

    bad = client.post(f"/api/v1/tickets/{ticket['id']}/gesture/commit", json={**body, "kind": "spin"})
    assert bad.status_code == 422


def test_far_drags_stop_at_the_last_calendar_day(client):
    project = _project(client)
    ticket = _ticket(client, project["id"], "A")
    far = {"kind": "move", "start_x": 0, "current_x": 1e9}

    preview = client.post(f"/api/v1/tickets/{ticket['id']}/gesture/preview", json=far)
    assert preview.status_code == 200
    assert preview.json()["days_moved"] == 25_000_000
    assert preview.json()["ticket"]["end_date"] == "9999-12-31"

    overflowing = {"kind": "move", "start_x": -1.7e308, "current_x": 1.7e308}
    response = client.post(f"/api/v1/tickets/{ticket['id']}/gesture/preview", json=overflowing)
    assert response.status_code == 422

    commit = client.post(f"/api/v1/tickets/{ticket['id']}/gesture/commit", json=far)
    assert commit.status_code == 200
    layout = client.get(f"/api/v1/projects/{project['id']}/timeline")
    assert layout.status_code == 200
    assert layout.json()["range_end"] == "9999-12-31"


def test_timeline_handles_tickets_at_the_end_of_the_calendar(client):
    project = _project(client)
    _ticket(client, project["id"], "Last", start="9999-12-30", end="9999-12-31")

    response = client.get(f"/api/v1/projects/{project['id']}/timeline")

    assert response.status_code == 200
    layout = response.json()
    assert (layout["range_start"], layout["range_end"], layout["total_days"]) == ("9999-12-28", "9999-12-31", 4)
    assert layout["bars"][0]["left"] == 2 * 40


def test_delete_ticket_cascades_to_subtasks(client):
    project = _project(client)
    a = _ticket(client, project["id"], "A")
    child = _ticket(client, project["id"], "A1", parent_id=a["id"])
    b = _ticket(client, project["id"], "B")

    response = client.delete(f"/api/v1/tickets/{a['id']}")

    assert response.json()["deleted_ids"] == sorted([a["id"], child["id"]])
    remaining = client.get(f"/api/v1/projects/{project['id']}/tickets").json()
    assert [(t["id"], t["sort_order"]) for t in remaining] == [(b["id"], 0)]


def test_assignee_delete_unassigns_tickets(client):
    project = _project(client)
    person = client.post("/api/v1/assignees", json={"name": "Dana"}).json()
    ticket = _ticket(client, project["id"], "A", assignee_id=person["id"])

    response = client.delete(f"/api/v1/assignees/{person['id']}")

    assert response.json() == {"status": "deleted", "released_tickets": 1}
    assert client.get(f"/api/v1/tickets/{ticket['id']}").json()["assignee_id"] is None


def test_dashboard_counts_overdue_and_due_soon(client):
    today = get_today(settings.TZ)
    project = _project(client, status="in_progress")
    planned = _project(client, "Later")
    _ticket(client, planned["id"], "draft", start=today.isoformat(), end=today.isoformat())
    person = client.post("/api/v1/assignees", json={"name": "Dana"}).json()
    late_start = (today - timedelta(days=5)).isoformat()
    _ticket(client, project["id"], "late", start=late_start, end=(today - timedelta(days=1)).isoformat())
    _ticket(
        client,
        project["id"],
        "soon",
        start=today.isoformat(),
        end=(today + timedelta(days=3)).isoformat(),
        assignee_id=person["id"],
    )

    data = client.get("/api/v1/dashboard").json()

    assert data["project_counts"] == {"total": 2, "by_status": {"planning": 1, "in_progress": 1, "completed": 0}}
    assert [s["project_id"] for s in data["project_stats"]] == [project["id"]]
    stats = data["project_stats"][0]
    assert stats["total_tickets"] == 2
    assert stats["overdue_tickets"] == 1
    assert stats["due_soon_tickets"] == 1
    assert stats["top_assignees"] == [["Dana", 1]]
    assert data["global_stats"] == {"total_tickets": 3, "total_overdue": 1, "total_due_soon": 2}
    assert data["assignee_stats"][0]["assignee_name"] == "Dana"

    everything = client.get("/api/v1/dashboard", params={"status": "all"}).json()
    assert len(everything["project_stats"]) == 2
    assert client.get("/api/v1/dashboard", params={"status": "archived"}).status_code == 422


def test_errors_use_the_envelope(client):
    missing = client.get("/api/v1/projects/does-not-exist")
    assert missing.status_code == 404
    assert missing.json() == {"code": "not_found", "message": "Not found"}

    project = _project(client)
    reversed_dates = client.post(
        f"/api/v1/projects/{project['id']}/tickets",
        json={"name": "Backwards", "start_date": "2024-03-06", "end_date": "2024-03-04"},
    )
    assert reversed_dates.status_code == 422
    assert reversed_dates.json()["code"] == "validation_error"

    other = _project(client, "Other")
    foreign = _ticket(client, other["id"], "Foreign")
    cross = client.post(
        f"/api/v1/projects/{project['id']}/tickets",
        json={"name": "Child", "start_date": "2024-03-04", "end_date": "2024-03-04", "parent_id": foreign["id"]},
    )
    assert cross.status_code == 422
    assert cross.json()["code"] == "invalid_request"


def test_api_key_is_enforced_when_configured(client, monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "s3cret")

    assert client.get("/api/v1/projects").status_code == 401
    assert client.get("/api/v1/projects", headers={"X-API-Key": "wrong"}).json()["message"] == "Invalid API key"
    assert client.get("/api/v1/projects", headers={"X-API-Key": "s3cret"}).status_code == 200
