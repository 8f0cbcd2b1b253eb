"""
services/attendance_service.py

Batch attendance submission.
- Existing (student, date) records are reported as a 409 conflict unless override is set.
- The unique constraint on attendance_records(student_id, date) backs the pre-check; an
  IntegrityError during commit is reported as the same conflict.
"""

import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from repositories.attendance_repo import AttendanceRepository
from repositories.student_repo import StudentRepository
from schemas.attendance import (
    BatchAttendanceRequest,
    BatchResultEntry,
    BatchStudentEntry,
    BatchSummary,
    DuplicateEntry,
    ExistingRecordFlags,
)
from services.exceptions import BusinessRuleError, DuplicateAttendanceError
from services.report_cache import report_cache

logger = logging.getLogger(__name__)


def parse_submission_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise BusinessRuleError(
            "Invalid request data",
            details=[{"field": "date", "message": "Date must be a valid calendar date"}],
        )


def record_flags(entry: BatchStudentEntry) -> dict:
    """Stored flags for one submitted entry."""
    return {
        "late": entry.status == "LATE" or entry.late,
        "early_dismissal": entry.early_dismissal,
        "excused": entry.status == "EXCUSED",
    }


class AttendanceService:
    def __init__(self, db: Session):
        self.db = db
        self.attendance = AttendanceRepository(db)
        self.students = StudentRepository(db)

    def find_duplicates(self, request: BatchAttendanceRequest) -> List[DuplicateEntry]:
        on_date = parse_submission_date(request.date)
        incoming = {s.id: s for s in request.students}
        duplicates = []
        for existing in self.attendance.find_existing(incoming.keys(), on_date):
            entry = incoming[existing.student_id]
            duplicates.append(DuplicateEntry(
                student_id=existing.student_id,
                existing_status=existing.status,
                existing_record=ExistingRecordFlags(
                    late=existing.late,
                    early_dismissal=existing.early_dismissal,
                    excused=existing.excused,
                ),
                incoming_status=entry.status,
                incoming_record=ExistingRecordFlags(**record_flags(entry)),
            ))
        return duplicates

    def submit_batch(self, request: BatchAttendanceRequest) -> dict:
        on_date = parse_submission_date(request.date)

        if not request.override:
            duplicates = self.find_duplicates(request)
            if duplicates:
                raise DuplicateAttendanceError(
                    [d.model_dump() for d in duplicates],
                    message="Some students already have attendance recorded for this date. "
                            "Do you want to update their records?",
                )

        known = {s.id: s for s in self.students.get_many(s.id for s in request.students)}
        results: List[BatchResultEntry] = []
        try:
            for entry in request.students:
                student = known.get(entry.id)
                if student is None:
                    results.append(BatchResultEntry(
                        student_id=entry.id, status="error", error=f"Student with ID {entry.id} not found",
                    ))
                    continue

                self.attendance.upsert(entry.id, on_date, entry.status, **record_flags(entry))
                # a repeated id in the same batch must see the row written above
                self.db.flush()
                results.append(BatchResultEntry(
                    student_id=entry.id,
                    status="success",
                    message=f"Attendance marked as {entry.status} for {student.full_name}",
                ))

            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("attendance batch for %s hit the (student, date) unique constraint", on_date)
            raise DuplicateAttendanceError(
                [d.model_dump() for d in self.find_duplicates(request)],
                message="Attendance was recorded concurrently for this date; resubmit with override to update",
            )

        report_cache.clear()

        successful = sum(1 for r in results if r.status == "success")
        summary = BatchSummary(total=len(results), successful=successful, failed=len(results) - successful)
        logger.info("attendance batch %s: %s ok, %s failed", on_date, summary.successful, summary.failed)
        return {
            "date": on_date.isoformat(),
            "summary": summary,
            "results": results,
            "message": f"Batch attendance processed: {summary.successful} successful, {summary.failed} failed",
        }

    def list_records(self, student_id: Optional[str] = None, on_date: Optional[date] = None):
        return self.attendance.list(student_id=student_id, on_date=on_date)
