from datetime import date, timedelta

import pytest

from tests.conftest import add_attendance


@pytest.fixture
def history(db, roster):
    today = date.today()
    for i in range(1, 4):
        day = today - timedelta(days=i)
        add_attendance(db, "STU001", day, "PRESENT")
        add_attendance(db, "STU002", day, "ABSENT")
        add_attendance(db, "STU003", day, "LATE")
    return db


def test_report_with_pagination_and_cache(client, history):
    payload = {
        "filters": {"student_ids": ["STU001", "STU002"]},
        "pagination": {"page": 1, "limit": 2},
        "sorting": {"sort_by": "date", "sort_order": "desc"},
    }
    first = client.post("/v1/reports/", json=payload)
    assert first.status_code == 200
    data = first.json()["data"]
    assert len(data["records"]) == 2
    assert data["pagination"]["total_items"] == 6
    assert data["summary"]["total_students"] == 2
    assert data["metrics"]["cache_hit"] is False
    assert data["report_type"] == "summary"

    second = client.post("/v1/reports/", json=payload).json()["data"]
    assert second["metrics"]["cache_hit"] is True
    assert second["query"]["hash"] == data["query"]["hash"]


def test_report_rejects_bad_filters(client, history):
    short = client.post("/v1/reports/", json={"filters": {"last_name": "S"}})
    assert short.status_code == 400
    assert short.json()["error"]["details"] == [
        {"field": "last_name", "message": "Search query requires at least 2 characters"}
    ]

    unknown = client.post("/v1/reports/", json={"filters": {"colour": "red"}})
    assert unknown.status_code == 400
    assert unknown.json()["error"]["code"] == "VALIDATION_ERROR"

    too_big = client.post("/v1/reports/", json={"pagination": {"page": 1, "limit": 500}})
    assert too_big.status_code == 400


def test_summary_endpoint(client, history):
    resp = client.get("/v1/reports/summary", params={"period": "7days"})
    assert resp.status_code == 200
    summary = resp.json()["data"]["summary"]
    assert summary["total_records"] == 9
    assert summary["overall_stats"]["total_tardy_days"] == 3

    assert client.get("/v1/reports/summary", params={"period": "week"}).status_code == 400


def test_validate_filters_sanitizes_input(client):
    data = client.post("/v1/reports/validate-filters", json={"last_name": "<S>", "statuses": []}).json()["data"]
    assert data["is_valid"] is False
    assert data["field_errors"] == {"last_name": ["Search query requires at least 2 characters"]}
    assert data["warnings"] == ["No attendance statuses selected - results may be empty"]


def test_export_csv(client, history):
    resp = client.post("/v1/reports/export", json={"filters": {"status": "LATE"}})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "attachment" in resp.headers["content-disposition"]
    lines = resp.text.strip().splitlines()
    assert lines[0].startswith("Student ID,Student Name")
    assert len(lines) == 4


def test_saved_configs(client, history):
    created = client.post("/v1/reports/configs", json={
        "name": "Absences", "request": {"filters": {"status": "ABSENT"}},
    })
    assert created.status_code == 201
    config_id = created.json()["data"]["id"]

    listed = client.get("/v1/reports/configs").json()["data"]
    assert [c["name"] for c in listed] == ["Absences"]

    run = client.post(f"/v1/reports/configs/{config_id}/run").json()["data"]
    assert run["summary"]["overall_stats"]["total_absent_days"] == 3

    assert client.delete(f"/v1/reports/configs/{config_id}").status_code == 200
    missing = client.delete(f"/v1/reports/configs/{config_id}")
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "NOT_FOUND"
