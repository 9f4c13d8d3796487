from __future__ import annotations

import pytest

from attendance_ledger.container import build_services
from attendance_ledger.main import create_app


@pytest.fixture
def client(monkeypatch, attendance_repo, employees, clock):
    monkeypatch.setenv("APP_ENV", "testing")
    container = build_services(attendance_repo, employees, clock=clock)
    app = create_app(container)
    return app.test_client()


def test_today_before_clock_in(client):
    resp = client.get("/api/attendance/emp-1/today")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["state"] == "NOT_CLOCKED_IN"
    assert body["record"] is None


def test_clock_in_and_out_over_http(client, clock):
    resp = client.post("/api/attendance/emp-1/clock-in")
    assert resp.status_code == 200
    assert resp.get_json()["record"]["num_clock_ins"] == 1

    clock.set_time("12:30:00")
    resp = client.post("/api/attendance/emp-1/clock-out")
    body = resp.get_json()
    assert body["success"] is True
    assert body["record"]["total_hours_worked"] == "03:30:00"
    assert body["record"]["date"] == "2026-02-02"


def test_error_codes_map_to_http_status(client):
    assert client.post("/api/attendance/ghost/clock-in").status_code == 404
    resp = client.post("/api/attendance/emp-1/clock-out")
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "NO_ACTIVE_SESSION"


def test_store_failure_is_503_when_retryable(client, attendance_repo):
    client.post("/api/attendance/emp-1/clock-in")
    attendance_repo.failing_employees.add("emp-1")

    resp = client.post("/api/attendance/emp-1/clock-out")

    assert resp.status_code == 503
    assert resp.get_json()["retryable"] is True


def test_idempotency_key_header_replays_result(client):
    headers = {"Idempotency-Key": "press-42"}
    first = client.post("/api/attendance/emp-1/punch", headers=headers).get_json()
    again = client.post("/api/attendance/emp-1/punch", headers=headers).get_json()

    assert first["action"] == again["action"] == "clock_in"
    assert again["record"]["num_clock_ins"] == 1


def test_finalize_and_reset_endpoints(client, clock):
    client.post("/api/attendance/emp-1/clock-in")
    client.post("/api/attendance/emp-2/clock-in")
    clock.set_time("23:00:00")

    resp = client.post("/api/attendance/emp-1/finalize")
    assert resp.get_json()["record"]["last_clock_out"] == "23:59:59"

    resp = client.post("/api/attendance/reset")
    body = resp.get_json()
    assert body["success"] is True
    assert [r["employee_id"] for r in body["finalized"]] == ["emp-2"]


def test_history_rejects_unknown_period(client):
    resp = client.get("/api/attendance/emp-1/history?period=decade")

    assert resp.status_code == 400


def test_history_summarises_period(client, clock):
    client.post("/api/attendance/emp-1/clock-in")
    clock.set_time("17:00:00")
    client.post("/api/attendance/emp-1/clock-out")

    body = client.get("/api/attendance/emp-1/history?period=7days").get_json()

    assert body["present_days"] == 1
    assert body["total_days"] == 7
    assert body["total_hours_worked"] == "08:00:00"


def test_recent_lists_records_newest_first(client, clock):
    client.post("/api/attendance/emp-1/clock-in")
    clock.advance(days=1)
    client.post("/api/attendance/emp-1/clock-in")

    body = client.get("/api/attendance/emp-1/recent?limit=1").get_json()

    assert [r["date"] for r in body["rows"]] == ["2026-02-03"]
    assert client.get("/api/attendance/emp-1/recent?limit=0").status_code == 400
