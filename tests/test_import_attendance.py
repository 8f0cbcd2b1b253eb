from models.attendance import AttendanceRecord as AttendanceModel
from models.students import Student as StudentModel
from scripts.import_attendance import import_attendance, import_students
from services.report_cache import report_cache


def _write(path, text):
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_import_students_and_attendance(db, tmp_path):
    students_csv = _write(tmp_path / "students.csv", "id,first_name,last_name,grade\n"
                                                     "STU001,Ann,Smith,5\n"
                                                     "STU002,Bob,Jones,\n")
    attendance_csv = _write(tmp_path / "attendance.csv", "student_id,date,status,late,early_dismissal\n"
                                                         "STU001,2024-03-01,late,,\n"
                                                         "STU002,2024-03-01,PRESENT,no,yes\n"
                                                         "STU002,2024-03-02,EXCUSED,,\n")

    assert import_students(db, students_csv) == 2
    assert db.get(StudentModel, "STU002").grade is None

    report_cache.set("stale", object())
    assert import_attendance(db, attendance_csv) == 3
    assert len(report_cache) == 0

    late = db.query(AttendanceModel).filter_by(student_id="STU001").one()
    assert (late.status, late.late) == ("LATE", True)
    early = db.query(AttendanceModel).filter_by(student_id="STU002", status="PRESENT").one()
    assert (early.late, early.early_dismissal) == (False, True)
    assert db.query(AttendanceModel).filter_by(status="EXCUSED").one().excused is True


def test_reimport_updates_instead_of_duplicating(db, tmp_path):
    _write(tmp_path / "s.csv", "id,first_name,last_name,grade\nSTU001,Ann,Smith,5\n")
    import_students(db, str(tmp_path / "s.csv"))

    import_attendance(db, _write(tmp_path / "a.csv", "student_id,date,status\nSTU001,2024-03-01,ABSENT\n"))
    import_attendance(db, _write(tmp_path / "a.csv", "student_id,date,status\nSTU001,2024-03-01,PRESENT\n"))

    rows = db.query(AttendanceModel).all()
    assert [(r.student_id, r.status) for r in rows] == [("STU001", "PRESENT")]


def test_rows_with_unknown_status_are_skipped(db, tmp_path, caplog):
    from services.report_service import ReportService

    _write(tmp_path / "s.csv", "id,first_name,last_name,grade\nSTU001,Ann,Smith,5\n")
    import_students(db, str(tmp_path / "s.csv"))

    attendance_csv = _write(tmp_path / "a.csv", "student_id,date,status\n"
                                                "STU001,2024-03-01,TARDY\n"
                                                "STU001,2024-03-02,absent\n")
    with caplog.at_level("WARNING", logger="scripts.import_attendance"):
        assert import_attendance(db, attendance_csv) == 1
    assert "Invalid attendance status: TARDY" in caplog.text

    rows = db.query(AttendanceModel).all()
    assert [(r.date.isoformat(), r.status) for r in rows] == [("2024-03-02", "ABSENT")]

    result = ReportService(db).generate_report(use_cache=False)
    assert [r.status for r in result.records] == ["ABSENT"]
