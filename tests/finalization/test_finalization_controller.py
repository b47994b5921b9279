from __future__ import annotations

from datetime import datetime

import pytest
from flask import Flask

from src.attendance_finalization.attendance_finalization.core.enums import FinalState, LiveState
from src.attendance_finalization.attendance_finalization.finalization.controller import register
from tests.fakes import FakeCalendar, World, at, record


def _client(world: World, *, role="admin"):
    app = Flask(__name__)
    app.secret_key = "test-secret"
    app.config["TESTING"] = True
    register(app, world.container)
    client = app.test_client()
    if role is not None:
        with client.session_transaction() as session:
            session["user_id"] = 1
            session["role"] = role
    return client


@pytest.fixture
def world():
    return World(datetime(2025, 1, 6, 18, 0), records=[record(status=LiveState.IN_PROGRESS, clock_in=at(9))])


def test_requires_login(world):
    response = _client(world, role=None).post("/admin/attendance/finalize")
    assert response.status_code == 401


def test_requires_admin_role(world):
    response = _client(world, role="staff").post("/admin/attendance/finalize", json={"date": "2025-01-06"})
    assert response.status_code == 403
    assert world.records.saves == 0


def test_finalize_day_for_given_date(world):
    response = _client(world).post("/admin/attendance/finalize", json={"date": "2025-01-06"})

    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    assert body["data"]["autoFinalized"] == 1
    assert body["data"]["absent"] == 1
    assert world.stored(1).status is FinalState.PRESENT


def test_finalize_day_defaults_to_today(world):
    response = _client(world).post("/admin/attendance/finalize")

    assert response.status_code == 200
    assert response.get_json()["data"]["processed"] == 2


def test_bad_date_is_rejected(world):
    response = _client(world).post("/admin/attendance/finalize", json={"date": "06/01/2025"})

    assert response.status_code == 400
    assert "YYYY-MM-DD" in response.get_json()["message"]


def test_holiday_response(world):
    world.calendar.holidays.add(datetime(2025, 1, 6).date())

    body = _client(world).post("/admin/attendance/finalize", json={"date": "2025-01-06"}).get_json()

    assert body["data"] == {"date": "2025-01-06", "skipped": True, "reason": "holiday"}


def test_calendar_outage_is_service_unavailable():
    world = World(datetime(2025, 1, 6, 18, 0), calendar=FakeCalendar(fail=True))

    response = _client(world).post("/admin/attendance/finalize")

    assert response.status_code == 503


def test_finalize_single_employee(world):
    response = _client(world).post("/admin/attendance/finalize/2?date=2025-01-06")

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["employeeId"] == 2
    assert data["status"] == "absent"
    assert data["outcome"] == "marked absent"


def test_finalize_unknown_employee(world):
    response = _client(world).post("/admin/attendance/finalize/42")
    assert response.status_code == 400


def test_day_status(world):
    response = _client(world).get("/admin/attendance/finalization-status?date=2025-01-06")

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["needsFinalization"] is True
    assert data["pendingClockOut"] == 1


def test_employee_status(world):
    response = _client(world).get("/admin/attendance/finalization-status/1?date=2025-01-06")

    data = response.get_json()["data"]
    assert data["status"] == "in_progress"
    assert data["shiftFinished"] is True
    assert data["clockIn"] == "2025-01-06T09:00:00"


def test_not_clocked_in_lists_missing_employees(world):
    response = _client(world).get("/admin/attendance/not-clocked-in?date=2025-01-06")

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert [row["employeeId"] for row in data] == [2]
    assert data[0]["action"] == "NOT_CLOCKED_IN"
    assert world.records.creates == 0


def test_not_clocked_in_on_weekend_is_empty(world):
    response = _client(world).get("/admin/attendance/not-clocked-in?date=2025-01-11")

    assert response.get_json() == {"success": True, "data": []}


def test_not_clocked_in_requires_admin(world):
    response = _client(world, role="staff").get("/admin/attendance/not-clocked-in")
    assert response.status_code == 403
