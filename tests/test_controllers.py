from __future__ import annotations

import importlib
from datetime import datetime, timedelta, timezone

import pytest

from src.performance_tracker.performance_tracker.container import build_services
from src.performance_tracker.performance_tracker.core.exceptions import PersistenceError
from src.performance_tracker.performance_tracker.dailyforms.catalog import STANDARD_TASKS
from src.performance_tracker.performance_tracker.dailyforms.model import DailyForm
from src.performance_tracker.performance_tracker.main import create_app


@pytest.fixture
def container(monkeypatch, forms_repo, employees_repo):
    monkeypatch.setenv("APP_ENV", "testing")
    settings = importlib.import_module("config.testing")
    return build_services(forms_repo=forms_repo, employees_repo=employees_repo, settings=settings)


@pytest.fixture
def app(container):
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, user_id: int, *roles: str):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["roles"] = list(roles)


def test_missing_identity_is_401(client):
    resp = client.get("/api/daily-forms/today")
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "unauthorized"


def test_employee_cannot_call_admin_endpoints(client):
    login(client, 2, "employee")
    resp = client.get("/api/daily-forms/employee/2")
    assert resp.status_code == 403


def test_today_creates_form_with_edit_window(client):
    login(client, 2, "employee")

    resp = client.get("/api/daily-forms/today")
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["success"] is True
    assert body["state"] == "EDITABLE"
    assert body["editable"] is True
    assert len(body["form"]["tasks"]) == len(STANDARD_TASKS)
    assert set(body["time_remaining"]) == {"expired", "hours", "minutes", "seconds_remaining", "message"}


def test_draft_is_staged_and_flushed_on_read(client, container):
    login(client, 2, "employee")
    form_id = client.get("/api/daily-forms/today").get_json()["form"]["form_id"]
    task_id = STANDARD_TASKS[0].task_id

    resp = client.patch("/api/daily-forms/today", json={"tasks": [{"id": task_id, "checked": True}]})
    assert resp.status_code == 202
    assert resp.get_json()["accepted"] is True
    assert container.draft_coalescer.pending(2, form_id) is not None

    form = client.get("/api/daily-forms/today").get_json()["form"]
    task = next(t for t in form["tasks"] if t["id"] == task_id)
    assert task["employee_checked"] is True
    assert task["is_completed"] is False


def test_draft_with_bad_payload_is_400(client):
    login(client, 2, "employee")
    resp = client.patch("/api/daily-forms/today", json={"tasks": [{"id": "x", "checked": "yes"}]})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation_error"


def test_draft_naming_unknown_item_is_400_and_not_staged(client, container):
    login(client, 2, "employee")
    form_id = client.get("/api/daily-forms/today").get_json()["form"]["form_id"]
    checks = [{"id": t.task_id, "checked": True} for t in STANDARD_TASKS[:5]]

    resp = client.patch("/api/daily-forms/today", json={"tasks": checks + [{"id": "removed_item", "checked": True}]})

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation_error"
    assert container.draft_coalescer.pending(2, form_id) is None


def test_submit_review_confirm_flow(client):
    ids = [t.task_id for t in STANDARD_TASKS[:10]]
    login(client, 2, "employee")
    client.get("/api/daily-forms/today")

    resp = client.post("/api/daily-forms/submit", json={"tasks": [{"id": i, "checked": True} for i in ids]})
    assert resp.status_code == 200
    form_id = resp.get_json()["form"]["form_id"]

    again = client.post("/api/daily-forms/submit", json={})
    assert again.status_code == 409
    assert client.get("/api/daily-forms/can-submit").get_json()["can_submit"] is False

    locked = client.patch("/api/daily-forms/today", json={"screensharing": True})
    assert locked.status_code == 200
    assert locked.get_json()["accepted"] is False

    login(client, 1, "admin")
    resp = client.post(
        f"/api/daily-forms/{form_id}/confirm",
        json={"tasks": [{"id": i, "checked": True} for i in ids], "hours_attended": 9, "screensharing": True},
    )
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["score"] == 25
    assert body["daily_bonus"] == 250

    listed = client.get("/api/daily-forms/employee/2").get_json()["forms"]
    assert [f["form_id"] for f in listed] == [form_id]


def test_confirm_unsubmitted_form_is_409(client):
    login(client, 2, "employee")
    form_id = client.get("/api/daily-forms/today").get_json()["form"]["form_id"]

    login(client, 1, "admin")
    resp = client.post(f"/api/daily-forms/{form_id}/confirm", json={})
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "invalid_state"


def test_unknown_form_is_404(client):
    login(client, 1, "admin")
    resp = client.get("/api/daily-forms/12345")
    assert resp.status_code == 404
    assert resp.get_json()["context"] == {"form_id": 12345}


def test_time_tracking_accepts_clock_times(client):
    login(client, 2, "employee")
    form_id = client.get("/api/daily-forms/today").get_json()["form"]["form_id"]

    resp = client.put(f"/api/daily-forms/time-tracking/{form_id}", json={"entry_time": "09:00", "exit_time": "17:30"})

    assert resp.status_code == 200
    assert resp.get_json()["form"]["hours_attended"] == 8.5


def test_custom_tag_endpoints(client):
    login(client, 2, "employee")
    form_id = client.get("/api/daily-forms/today").get_json()["form"]["form_id"]

    resp = client.post(f"/api/daily-forms/custom-tag/{form_id}", json={"name": "deep work", "color": "#10b981"})
    assert resp.status_code == 201
    tag = resp.get_json()["tag"]
    assert tag["color"] == "#10b981"

    resp = client.delete(f"/api/daily-forms/custom-tag/{form_id}/{tag['id']}")
    assert resp.status_code == 200
    assert resp.get_json()["form"]["custom_tags"] == []


def test_admin_create_for_employee_and_duplicate(client):
    login(client, 1, "admin")
    payload = {
        "employee_id": 3,
        "date": "2025-01-15",
        "entry_time": "09:00",
        "exit_time": "15:00",
        "custom_tasks": [{"label": "Client demo"}],
        "custom_tags": [{"name": "demo"}],
    }

    resp = client.post("/api/daily-forms/admin/create-for-employee", json=payload)
    assert resp.status_code == 201
    form = resp.get_json()["form"]
    assert form["date"] == "2025-01-15"
    assert form["hours_attended"] == 6.0
    assert [t["label"] for t in form["custom_tasks"]] == ["Client demo"]

    dup = client.post("/api/daily-forms/admin/create-for-employee", json=payload)
    assert dup.status_code == 409


def test_admin_auto_select_and_template(client):
    login(client, 2, "employee")
    client.get("/api/daily-forms/today")
    task_id = STANDARD_TASKS[0].task_id
    form_id = client.post("/api/daily-forms/submit", json={"tasks": [{"id": task_id, "checked": True}]}).get_json()[
        "form"
    ]["form_id"]

    login(client, 1, "admin")
    form = client.post(f"/api/daily-forms/admin/auto-select/{form_id}").get_json()["form"]
    assert form["admin_auto_selected"] is True
    assert next(t for t in form["tasks"] if t["id"] == task_id)["is_completed"] is True

    template = client.get("/api/daily-forms/admin/default-template").get_json()["template"]
    assert len(template["standard_tasks"]) == len(STANDARD_TASKS)


def test_leaderboard_endpoint(client, forms_repo):
    today = datetime.now(timezone.utc).date()
    forms_repo.put(DailyForm(form_id=0, employee_id=3, form_date=today - timedelta(days=1), submitted=True))

    login(client, 2, "employee")
    body = client.get("/api/daily-forms/leaderboard?days=7&view=auto").get_json()

    assert body["success"] is True
    assert body["meta"]["source_tier"] == "submitted"
    assert [row["employee"]["id"] for row in body["leaderboard"]] == [2, 3, 4]


def test_leaderboard_rejects_bad_query(client):
    login(client, 2, "employee")
    assert client.get("/api/daily-forms/leaderboard?days=abc").status_code == 400
    assert client.get("/api/daily-forms/leaderboard?view=everything").status_code == 400
    assert client.get("/api/daily-forms/leaderboard?date=2025-13-01").status_code == 400


def test_my_stats(client):
    login(client, 2, "employee")
    body = client.get("/api/daily-forms/my-stats?days=30").get_json()

    assert body["stats"]["days_worked"] == 0
    assert body["meta"]["type"] == "rolling"


def test_storage_outage_is_503(client, forms_repo, monkeypatch):
    def broken(*args, **kwargs):
        raise PersistenceError("db down")

    monkeypatch.setattr(forms_repo, "get_for_employee_and_date", broken)
    login(client, 2, "employee")

    resp = client.get("/api/daily-forms/today")
    assert resp.status_code == 503
    assert resp.get_json()["error"] == "storage_unavailable"
