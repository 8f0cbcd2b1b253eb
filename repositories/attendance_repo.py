from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from models.attendance import AttendanceRecord as AttendanceModel


class AttendanceRepository:
    """All queries against attendance_records."""

    def __init__(self, db: Session):
        self.db = db

    def list(self, student_id: Optional[str] = None, on_date: Optional[date] = None) -> List[AttendanceModel]:
        q = self.db.query(AttendanceModel)
        if student_id:
            q = q.filter(AttendanceModel.student_id == student_id)
        if on_date:
            q = q.filter(AttendanceModel.date == on_date)
        return q.order_by(AttendanceModel.date, AttendanceModel.student_id).all()

    def all(self) -> List[AttendanceModel]:
        return self.list()

    def get(self, student_id: str, on_date: date) -> Optional[AttendanceModel]:
        return (
            self.db.query(AttendanceModel)
            .filter(AttendanceModel.student_id == student_id, AttendanceModel.date == on_date)
            .first()
        )

    def find_existing(self, student_ids: Iterable[str], on_date: date) -> List[AttendanceModel]:
        ids = list(student_ids)
        if not ids:
            return []
        return (
            self.db.query(AttendanceModel)
            .filter(AttendanceModel.date == on_date, AttendanceModel.student_id.in_(ids))
            .all()
        )

    def upsert(self, student_id: str, on_date: date, status: str,
               late: bool, early_dismissal: bool, excused: bool) -> AttendanceModel:
        """Overwrite the (student, date) record if present, otherwise add a new one. Caller commits."""
        record = self.get(student_id, on_date)
        if record is None:
            record = AttendanceModel(student_id=student_id, date=on_date)
            self.db.add(record)
        record.status = status
        record.late = late
        record.early_dismissal = early_dismissal
        record.excused = excused
        return record

    def add(self, record: AttendanceModel) -> AttendanceModel:
        self.db.add(record)
        return record
