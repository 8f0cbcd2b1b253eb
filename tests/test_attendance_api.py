from datetime import date

from services.report_cache import report_cache
from tests.conftest import add_attendance

URL = "/v1/attendance/batch"


def _batch(day="2024-03-01", override=False, **entries):
    students = [{"id": sid, **entry} for sid, entry in entries.items()]
    return {"date": day, "students": students, "override": override}


def test_batch_records_attendance(client, roster):
    resp = client.post(URL, json=_batch(
        STU001={"status": "PRESENT", "late": True},
        STU002={"status": "ABSENT", "earlyDismissal": False},
    ))
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["date"] == "2024-03-01"
    assert body["summary"] == {"total": 2, "successful": 2, "failed": 0}
    assert body["message"] == "Batch attendance processed: 2 successful, 0 failed"
    assert "X-Latency-Ms" in resp.headers

    listed = client.get("/v1/attendance/", params={"date": "2024-03-01"}).json()["data"]
    by_student = {r["student_id"]: r for r in listed}
    assert by_student["STU001"]["status"] == "PRESENT"
    assert by_student["STU001"]["late"] is True
    assert by_student["STU002"]["late"] is False


def test_batch_late_status_sets_flag_and_excused_mirrors_status(client, roster):
    client.post(URL, json=_batch(STU001={"status": "LATE"}, STU002={"status": "EXCUSED"}))
    records = {r["student_id"]: r for r in client.get("/v1/attendance/").json()["data"]}
    assert records["STU001"]["late"] is True
    assert records["STU002"]["excused"] is True


def test_unknown_student_is_reported_not_fatal(client, roster):
    body = client.post(URL, json=_batch(STU001={"status": "PRESENT"}, STU999={"status": "PRESENT"})).json()
    assert body["summary"] == {"total": 2, "successful": 1, "failed": 1}
    errors = [r for r in body["results"] if r["status"] == "error"]
    assert errors == [{"student_id": "STU999", "status": "error", "error": "Student with ID STU999 not found"}]


def test_existing_record_is_a_conflict(client, db, roster):
    add_attendance(db, "STU001", date(2024, 3, 1), "ABSENT")

    resp = client.post(URL, json=_batch(STU001={"status": "PRESENT"}, STU002={"status": "PRESENT"}))
    assert resp.status_code == 409
    error = resp.json()["error"]
    assert error["code"] == "DUPLICATE_RECORDS_FOUND"
    [dup] = error["details"]["duplicates"]
    assert dup["student_id"] == "STU001"
    assert dup["existing_status"] == "ABSENT"
    assert dup["incoming_status"] == "PRESENT"

    # nothing was written for STU002
    assert client.get("/v1/attendance/", params={"student_id": "STU002"}).json()["data"] == []


def test_override_updates_existing_record(client, db, roster):
    add_attendance(db, "STU001", date(2024, 3, 1), "ABSENT")

    resp = client.post(URL, json=_batch(override=True, STU001={"status": "LATE"}))
    assert resp.status_code == 200
    [record] = client.get("/v1/attendance/", params={"student_id": "STU001"}).json()["data"]
    assert record["status"] == "LATE"
    assert record["late"] is True


def test_check_duplicates_does_not_write(client, db, roster):
    add_attendance(db, "STU001", date(2024, 3, 1), "ABSENT")
    data = client.post("/v1/attendance/check-duplicates", json=_batch(
        STU001={"status": "PRESENT"}, STU002={"status": "PRESENT"},
    )).json()["data"]
    assert data["has_duplicates"] is True
    assert [d["student_id"] for d in data["duplicates"]] == ["STU001"]
    assert len(client.get("/v1/attendance/").json()["data"]) == 1


def test_invalid_payloads(client, roster):
    empty = client.post(URL, json={"date": "2024-03-01", "students": []})
    assert empty.status_code == 400
    assert empty.json()["error"]["code"] == "VALIDATION_ERROR"

    bad_status = client.post(URL, json=_batch(STU001={"status": "SICK"}))
    assert bad_status.status_code == 400
    assert bad_status.json()["error"]["details"]

    bad_date = client.post(URL, json=_batch(day="2024-02-30", STU001={"status": "PRESENT"}))
    assert bad_date.status_code == 400
    assert bad_date.json()["error"]["details"][0]["field"] == "date"

    bad_json = client.post(URL, content="{not json", headers={"Content-Type": "application/json"})
    assert bad_json.status_code == 400
    assert bad_json.json()["error"]["code"] == "INVALID_JSON"


def test_batch_only_accepts_post(client):
    resp = client.get(URL)
    assert resp.status_code == 405
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["code"] == "METHOD_NOT_ALLOWED"


def test_batch_write_clears_report_cache(client, roster):
    client.post("/v1/reports/", json={"filters": {}})
    assert len(report_cache) == 1

    client.post(URL, json=_batch(STU001={"status": "PRESENT"}))
    assert len(report_cache) == 0


def test_unique_constraint_violation_is_a_conflict(client, db, roster, monkeypatch):
    from repositories.attendance_repo import AttendanceRepository

    add_attendance(db, "STU001", date(2024, 3, 1), "ABSENT")
    # a concurrent writer got there first: the lookup misses and the insert hits the constraint
    monkeypatch.setattr(AttendanceRepository, "get", lambda self, student_id, on_date: None)

    resp = client.post(URL, json=_batch(override=True, STU001={"status": "PRESENT"}))
    assert resp.status_code == 409
    error = resp.json()["error"]
    assert error["code"] == "DUPLICATE_RECORDS_FOUND"
    duplicates = error["details"]["duplicates"]
    assert [d["student_id"] for d in duplicates] == ["STU001"]
    assert duplicates[0]["existing_status"] == "ABSENT"
    assert duplicates[0]["incoming_status"] == "PRESENT"


def test_repeated_student_in_one_batch_keeps_last_entry(client, roster):
    payload = {
        "date": "2024-03-01",
        "students": [{"id": "STU001", "status": "PRESENT"}, {"id": "STU001", "status": "LATE"}],
    }
    resp = client.post(URL, json=payload)
    assert resp.status_code == 200
    assert resp.json()["summary"] == {"total": 2, "successful": 2, "failed": 0}

    listed = client.get("/v1/attendance/", params={"date": "2024-03-01"}).json()["data"]
    assert len(listed) == 1
    assert listed[0]["status"] == "LATE"
    assert listed[0]["late"] is True


def test_unexpected_error_is_a_500_envelope(session_factory, roster, monkeypatch):
    from fastapi.testclient import TestClient

    from database.db import get_db
    from main import app
    from services.attendance_service import AttendanceService

    def boom(self, request):
        raise RuntimeError("disk on fire")

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    monkeypatch.setattr(AttendanceService, "submit_batch", boom)
    app.dependency_overrides[get_db] = override_get_db
    try:
        resp = TestClient(app, raise_server_exceptions=False).post(URL, json=_batch(STU001={"status": "PRESENT"}))
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 500
    assert resp.json()["error"] == {"code": "INTERNAL_ERROR", "message": "An unexpected error occurred"}
