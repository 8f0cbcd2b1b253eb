from datetime import date

from tests.conftest import add_attendance


def test_student_crud(client, roster):
    created = client.post("/v1/students/", json={"first_name": "Dana", "last_name": "Lee", "grade": "4"})
    assert created.status_code == 201
    assert created.json()["data"]["id"] == "STU004"

    found = client.get("/v1/students/", params={"search": "lee"}).json()
    assert [s["id"] for s in found["data"]] == ["STU004"]

    updated = client.put("/v1/students/STU004", json={"grade": "5"})
    assert updated.json()["data"] == {"id": "STU004", "first_name": "Dana", "last_name": "Lee", "grade": "5"}

    assert client.delete("/v1/students/STU004").status_code == 200
    missing = client.get("/v1/students/STU004")
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "NOT_FOUND"


def test_student_writes_refresh_cached_reports(client, db, roster):
    add_attendance(db, "STU001", date(2024, 3, 1), "PRESENT")
    payload = {"filters": {"student_ids": ["STU001"]}}
    before = client.post("/v1/reports/", json=payload).json()["data"]["records"]
    assert before[0]["student_name"] == "Ann Smith"

    client.put("/v1/students/STU001", json={"last_name": "Baker"})
    after = client.post("/v1/reports/", json=payload).json()["data"]
    assert after["metrics"]["cache_hit"] is False
    assert after["records"][0]["student_name"] == "Ann Baker"


def test_student_validation_errors(client, roster):
    resp = client.post("/v1/students/", json={"id": "STU001", "first_name": "Ann", "last_name": "Smith"})
    assert resp.status_code == 400
    assert resp.json()["error"]["details"] == [{"field": "id", "message": "Student ID already exists"}]

    dry_run = client.post("/v1/students/validate", json={"first_name": "4nn", "last_name": "Smith"}).json()
    assert dry_run["data"]["is_valid"] is False


def test_bulk_create_is_all_or_nothing(client, roster):
    bad = client.post("/v1/students/bulk", json={"students": [
        {"first_name": "Eve", "last_name": "Adams"},
        {"first_name": "", "last_name": "Nobody"},
    ]})
    assert bad.status_code == 400
    assert client.get("/v1/students/").json()["total"] == 3

    good = client.post("/v1/students/bulk", json={"students": [
        {"first_name": "Eve", "last_name": "Adams"},
        {"first_name": "Finn", "last_name": "Baker"},
    ]})
    assert good.status_code == 201
    assert [s["id"] for s in good.json()["data"]] == ["STU004", "STU005"]


def test_student_alerts_endpoint(client, roster):
    data = client.get("/v1/students/STU001/alerts").json()["data"]
    assert data["result"]["triggered_alerts"] == []
    assert data["student_name"] == "Ann Smith"


def test_class_enrollment(client, roster):
    created = client.post("/v1/classes/", json={"name": "Math", "grade": "5", "capacity": 2})
    assert created.status_code == 201
    school_class = created.json()["data"]
    assert school_class["id"] == "CLS001"
    assert school_class["display_name"] == "Math - 5th Grade"
    assert school_class["enrollment_status"] == "available"

    assigned = client.post("/v1/classes/CLS001/students", json={"student_ids": ["STU001", "STU002", "STU404"]})
    assert assigned.json()["data"] == {"added": ["STU001", "STU002"], "already_enrolled": [], "not_found": ["STU404"]}

    again = client.post("/v1/classes/CLS001/students", json={"student_ids": ["STU001"]})
    assert again.json()["data"]["already_enrolled"] == ["STU001"]

    full = client.get("/v1/classes/CLS001").json()["data"]
    assert (full["student_count"], full["enrollment_percentage"], full["enrollment_status"]) == (2, 100, "full")

    assert client.delete("/v1/classes/CLS001/students/STU002").status_code == 200
    members = client.get("/v1/classes/CLS001/students").json()["data"]
    assert [m["id"] for m in members] == ["STU001"]
    assert client.delete("/v1/classes/CLS001/students/STU002").status_code == 404


def test_class_update_and_delete(client):
    client.post("/v1/classes/", json={"name": "Art"})
    updated = client.put("/v1/classes/CLS001", json={"grade": "K", "status": "inactive"}).json()["data"]
    assert updated["grade_display"] == "Kindergarten"
    assert updated["status"] == "inactive"

    assert client.get("/v1/classes/", params={"status": "active"}).json()["data"] == []
    assert client.put("/v1/classes/CLS001", json={"name": "A"}).status_code == 400

    assert client.delete("/v1/classes/CLS001").status_code == 200
    assert client.get("/v1/classes/CLS001").status_code == 404
