import json
from datetime import date

import cli
from tests.conftest import add_attendance


def _seed(db):
    add_attendance(db, "STU001", date(2024, 3, 1), "ABSENT")
    add_attendance(db, "STU002", date(2024, 3, 1), "PRESENT", late=True)
    add_attendance(db, "STU003", date(2024, 3, 1), "PRESENT", early_dismissal=True)


def test_filter_requires_a_flag(session_factory, capsys):
    assert cli.main(["report", "filter"], session_factory=session_factory) == 1
    assert "At least one filter" in capsys.readouterr().err


def test_filter_by_last_name_and_status(db, roster, session_factory, capsys):
    _seed(db)
    code = cli.main(["report", "filter", "--last", "smith", "--status", "absent"], session_factory=session_factory)
    assert code == 0
    records = json.loads(capsys.readouterr().out)
    assert [(r["student_id"], r["status"]) for r in records] == [("STU001", "ABSENT")]


def test_late_and_early_reports(db, roster, session_factory, capsys):
    _seed(db)
    assert cli.main(["report", "late", "--date", "2024-03-01"], session_factory=session_factory) == 0
    assert [r["student_id"] for r in json.loads(capsys.readouterr().out)] == ["STU002"]

    assert cli.main(["report", "early"], session_factory=session_factory) == 0
    assert [r["student_id"] for r in json.loads(capsys.readouterr().out)] == ["STU003"]


def test_alerts_for_unknown_student(session_factory, capsys):
    assert cli.main(["alerts", "--student", "STU404"], session_factory=session_factory) == 1
    assert "STU404" in capsys.readouterr().err


def test_students_list(roster, session_factory, capsys):
    assert cli.main(["students", "list", "--search", "smith"], session_factory=session_factory) == 0
    assert [s["id"] for s in json.loads(capsys.readouterr().out)] == ["STU001", "STU003"]
