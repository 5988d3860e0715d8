from __future__ import annotations

import pytest

from src.attendance_engine.attendance_engine.core.exceptions import PersistenceError
from src.attendance_engine.attendance_engine.main import create_app


@pytest.fixture
def client(engine, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=engine)
    app.config["TESTING"] = True
    return app.test_client()


def test_punch_pairs_in_and_out(client):
    first = client.post("/api/attendance/punch", json={"zk_id": "7", "log_date": "2025-01-06", "time": "08:00"})
    second = client.post("/api/attendance/punch", json={"zk_id": "7", "log_date": "2025-01-06", "time": "17:00"})

    assert first.status_code == 200
    assert first.get_json()["action"] == "time_in"
    assert second.get_json()["action"] == "time_out"
    assert second.get_json()["record"]["time_out"] == "17:00:00"


def test_out_of_order_punch_is_a_conflict(client):
    client.post("/api/attendance/punch", json={"user_key": "7", "date": "2025-01-06", "time": "08:00"})

    resp = client.post("/api/attendance/punch", json={"user_key": "7", "date": "2025-01-06", "time": "07:00"})

    assert resp.status_code == 409
    assert resp.get_json() == {"success": False, "error": "punch precedes last time_in"}


def test_punch_requires_json_object(client):
    resp = client.post("/api/attendance/punch", data="nope", content_type="text/plain")

    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_storage_failure_is_503(client, attendance_repo, monkeypatch):
    def broken(*args, **kwargs):
        raise PersistenceError("db down")

    monkeypatch.setattr(attendance_repo, "get_for_user_and_date", broken)

    resp = client.post("/api/attendance/punch", json={"user_key": "7", "date": "2025-01-06", "time": "08:00"})

    assert resp.status_code == 503
    assert resp.get_json()["error"] == "storage unavailable"


def test_device_batch(client):
    resp = client.post(
        "/api/attendance/punches",
        json={
            "attendance": [
                {"zk_id": "7", "log_date": "2025-01-06", "time": "17:00"},
                {"zk_id": "7", "log_date": "2025-01-06", "time": "08:00"},
                {"zk_id": "7", "time": "09:00"},
            ]
        },
    )

    body = resp.get_json()
    assert body["processed"] == 3
    assert body["failed"] == 1
    assert [r["action"] for r in body["results"]] == ["time_out", "time_in", "error"]


def test_device_batch_requires_entries(client):
    resp = client.post("/api/attendance/punches", json={"attendance": []})

    assert resp.status_code == 400


def test_import_and_progress(client):
    rows = [
        {"userKey": "7", "date": "2025-01-06", "timeIn": "08:00", "timeOut": "17:00"},
        {"userKey": "7", "date": "2025-01-06", "timeIn": "08:02", "timeOut": "17:00"},
    ]

    resp = client.post("/api/attendance/import", json={"rows": rows, "job_id": "job-1"})
    body = resp.get_json()

    assert body["success"] is True
    assert body["status"] == "success"
    assert body["counts"]["inserted"] == 1
    assert body["counts"]["skipped"] == 1

    progress = client.get("/api/attendance/import/job-1").get_json()
    assert progress["state"] == "completed"
    assert progress["percent"] == 100

    assert client.post("/api/attendance/import/job-1/cancel").status_code == 404
    assert client.get("/api/attendance/import/unknown").status_code == 404


def test_import_raw_punch_format(client):
    resp = client.post(
        "/api/attendance/import",
        json={
            "format": "punches",
            "rows": [
                {"zk_id": "7", "timestamp": "2025-01-06T08:00:00"},
                {"zk_id": "7", "timestamp": "2025-01-06T17:00:00"},
            ],
        },
    )

    body = resp.get_json()
    assert body["counts"]["inserted"] == 1
    assert body["inserted"][0]["row"]["time_out"] == "17:00:00"


def test_import_raw_punches_with_offsets_and_bad_entries(client):
    resp = client.post(
        "/api/attendance/import",
        json={
            "format": "punches",
            "rows": [
                ["7", "2025-01-06T08:00:00"],
                ["7", "2025-01-06T12:00:00+08:00"],
                ["7", "2025-01-06T13:00:00", "extra"],
            ],
        },
    )

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["counts"]["failed"] == 1
    assert body["errors"][0]["row"] == {"value": ["7", "2025-01-06T13:00:00", "extra"]}
    assert body["status"] == "partial"


def test_import_all_rows_failed(client):
    resp = client.post("/api/attendance/import", json={"rows": [{"userKey": "7"}]})

    body = resp.get_json()
    assert body["status"] == "error"
    assert body["success"] is False


def test_import_unknown_policy(client):
    resp = client.post("/api/attendance/import", json={"rows": [], "policy": "lenient"})

    assert resp.status_code == 400


def test_daily_metrics_and_summary(client):
    client.post("/api/attendance/punch", json={"user_key": "7", "date": "2025-01-06", "time": "08:55"})
    client.post("/api/attendance/punch", json={"user_key": "7", "date": "2025-01-06", "time": "18:30"})

    metrics = client.get("/api/users/7/metrics?date=2025-01-06").get_json()["data"]
    summary = client.get("/api/users/7/summary?start=2025-01-03").get_json()["data"]

    assert metrics["metrics"] == {"nt": 9.58, "ot": 0.5, "lt": 0.0, "ut": 0.0, "nd": 0.0}
    assert (summary["start"], summary["end"]) == ("2025-01-01", "2025-01-15")
    assert summary["summary"]["worked_days"] == 1


def test_summary_rejects_long_range(client):
    resp = client.get("/api/users/7/summary?start=2025-01-01&end=2025-06-30")

    assert resp.status_code == 400


def test_schedule_override_endpoints(client):
    put = client.put(
        "/api/schedule-groups/3/overrides",
        json={"schedule_date": "2025-02-10", "work_schedule_start": "10:00 PM", "work_schedule_end": "6:00 AM"},
    )
    assert put.get_json()["success"] is True

    calendar = client.get("/api/schedule-groups/3/calendar/2025/2").get_json()
    assert len(calendar["data"]) == 28
    assert calendar["data"][9]["has_schedule"] is True

    resolved = client.get("/api/users/7/schedule?date=2025-02-10").get_json()["data"]
    assert resolved == {"start": "22:00", "end": "06:00", "source": "override"}


def test_schedule_override_validation(client):
    resp = client.put(
        "/api/schedule-groups/3/overrides",
        json={"schedule_date": "2025-02-10", "work_schedule_start": "08:00", "work_schedule_end": "08:00"},
    )

    assert resp.status_code == 400


def test_schedule_group_endpoints(client):
    created = client.post("/api/schedule-groups", json={"name": "Night crew"})
    assert created.status_code == 201
    new_id = created.get_json()["id"]

    listing = client.get("/api/schedule-groups?page=1").get_json()
    assert listing["data"][0] == {"id": new_id, "name": "Night crew", "created_at": None}
    assert listing["pagination"]["total_items"] == 3

    assert client.post("/api/schedule-groups", json={"name": "Night crew"}).status_code == 409
    assert client.post("/api/schedule-groups", json={"name": ""}).status_code == 400

    assert client.delete(f"/api/schedule-groups/{new_id}").get_json() == {"success": True}
    assert client.delete(f"/api/schedule-groups/{new_id}").status_code == 404


def test_override_for_missing_group_is_400(client):
    resp = client.put(
        "/api/schedule-groups/99/overrides",
        json={"schedule_date": "2025-02-10", "work_schedule_start": "08:00", "work_schedule_end": "17:00"},
    )

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "schedule group 99 does not exist"
