"""
CSV -> DB import for students and attendance.

  python -m scripts.import_attendance --students data/students.csv --attendance data/attendance.csv

students.csv:   id,first_name,last_name,grade
attendance.csv: student_id,date,status[,late,early_dismissal]

Attendance rows upsert on (student_id, date), so re-running an import is safe.
Rows whose status is not PRESENT, LATE, ABSENT or EXCUSED are skipped with a warning.
"""

import argparse
import csv
import logging
from datetime import datetime

from dotenv import load_dotenv
from sqlalchemy.orm import Session

load_dotenv()

from database.db import SessionLocal, init_db  # noqa: E402
from models.students import Student as StudentModel  # noqa: E402
from repositories.attendance_repo import AttendanceRepository  # noqa: E402
from services.report_cache import report_cache  # noqa: E402
from validators.report_filters import validate_attendance_status  # noqa: E402

logger = logging.getLogger(__name__)

STUDENTS_CSV = "data/students.csv"
ATTENDANCE_CSV = "data/attendance.csv"

_TRUE = {"1", "true", "yes", "y"}


def _flag(value) -> bool:
    return str(value or "").strip().lower() in _TRUE


def import_students(db: Session, path: str = STUDENTS_CSV) -> int:
    count = 0
    with open(path, newline="", encoding="utf-8-sig") as csvfile:
        for row in csv.DictReader(csvfile):
            student = db.get(StudentModel, row["id"].strip()) or StudentModel(id=row["id"].strip())
            student.first_name = row["first_name"].strip()
            student.last_name = row["last_name"].strip()
            student.grade = (row.get("grade") or "").strip() or None
            db.add(student)
            count += 1
    db.commit()
    return count


def import_attendance(db: Session, path: str = ATTENDANCE_CSV) -> int:
    repo = AttendanceRepository(db)
    count = 0
    with open(path, newline="", encoding="utf-8-sig") as csvfile:
        for line_no, row in enumerate(csv.DictReader(csvfile), start=2):
            checked = validate_attendance_status(row.get("status"))
            if not checked.is_valid:
                logger.warning("%s:%s skipped: %s", path, line_no, "; ".join(checked.errors))
                continue
            status = checked.data.value
            repo.upsert(
                student_id=row["student_id"].strip(),
                on_date=datetime.strptime(row["date"].strip(), "%Y-%m-%d").date(),
                status=status,
                late=status == "LATE" or _flag(row.get("late")),
                early_dismissal=_flag(row.get("early_dismissal")),
                excused=status == "EXCUSED",
            )
            db.flush()
            count += 1
    db.commit()
    report_cache.clear()
    return count


def main(argv=None):
    parser = argparse.ArgumentParser(description="Import students and attendance from CSV")
    parser.add_argument("--students", default=None, help=f"e.g. {STUDENTS_CSV}")
    parser.add_argument("--attendance", default=None, help=f"e.g. {ATTENDANCE_CSV}")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    init_db()
    db: Session = SessionLocal()
    try:
        if args.students:
            logger.info("students imported: %s", import_students(db, args.students))
        if args.attendance:
            logger.info("attendance rows imported: %s", import_attendance(db, args.attendance))
    finally:
        db.close()


if __name__ == "__main__":
    main()
