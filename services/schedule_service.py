import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from models.attendance import AttendanceRecord as AttendanceModel
from models.schedule import ScheduledDayOff as DayOffModel
from repositories.attendance_repo import AttendanceRepository
from repositories.schedule_repo import ScheduleRepository
from repositories.student_repo import StudentRepository
from schemas.enums import DayOffReason
from services.exceptions import BusinessRuleError, ConflictError, NotFoundError
from services.report_cache import report_cache

logger = logging.getLogger(__name__)


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5  # Saturday=5, Sunday=6


class ScheduleService:
    """Planned school-wide days off and the excused absences they imply."""

    def __init__(self, db: Session):
        self.db = db
        self.schedule = ScheduleRepository(db)
        self.students = StudentRepository(db)
        self.attendance = AttendanceRepository(db)

    def plan_day_off(self, on_date: date, reason: DayOffReason, today: Optional[date] = None) -> DayOffModel:
        if on_date < (today or date.today()):
            raise BusinessRuleError(
                "Cannot schedule a day off in the past",
                details=[{"field": "date", "message": "Date must be today or later"}],
            )
        if self.schedule.get(on_date) is not None:
            raise ConflictError(f"{on_date.isoformat()} is already scheduled as a day off", code="DAY_OFF_EXISTS")

        day_off = self.schedule.add(DayOffModel(date=on_date, reason=DayOffReason(reason).value))
        self.db.commit()
        self.db.refresh(day_off)
        if is_weekend(on_date):
            logger.info("day off planned on a weekend: %s", on_date)
        return day_off

    def list_days_off(self, start: Optional[date] = None, end: Optional[date] = None) -> List[DayOffModel]:
        return self.schedule.list(start, end)

    def remove_day_off(self, on_date: date) -> None:
        day_off = self.schedule.get(on_date)
        if day_off is None:
            raise NotFoundError(f"{on_date.isoformat()} is not scheduled as a day off")
        self.schedule.delete(day_off)
        self.db.commit()

    def is_planned_day_off(self, on_date: date) -> bool:
        return self.schedule.get(on_date) is not None

    def is_off_day(self, on_date: date) -> bool:
        return is_weekend(on_date) or self.is_planned_day_off(on_date)

    def apply_day_off_to_all_students(self, on_date: date) -> int:
        """Write an EXCUSED record for every student without one on that date; returns how many were written."""
        if not self.is_planned_day_off(on_date):
            raise NotFoundError("This date is not scheduled as a day off")

        already = {r.student_id for r in self.attendance.list(on_date=on_date)}
        processed = 0
        for student in self.students.list():
            if student.id in already:
                continue
            self.attendance.add(AttendanceModel(
                student_id=student.id, date=on_date, status="EXCUSED",
                late=False, early_dismissal=False, excused=True,
            ))
            processed += 1

        self.db.commit()
        if processed:
            report_cache.clear()
        logger.info("bulk excuse %s: %s records", on_date, processed)
        return processed
