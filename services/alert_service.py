"""
services/alert_service.py

Threshold alert evaluation.
- Module-level functions are pure: they take records and a threshold set, and count events in
  a rolling window ("today" minus N days, boundary day included) or over all time.
- AlertService binds them to the attendance / student / threshold repositories.
"""

import logging
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from config.constants import THIRTY_DAYS
from config.settings import settings
from repositories.attendance_repo import AttendanceRepository
from repositories.student_repo import StudentRepository
from repositories.threshold_repo import ThresholdRepository
from schemas.alerts import (
    AlertResult,
    ApproachingFlags,
    AttendanceTrend,
    StudentAlertSummary,
    ThresholdSet,
    TriggeredAlert,
)
from schemas.enums import AlertPeriod, AlertType
from services.exceptions import BusinessRuleError, NotFoundError
from validators.thresholds import validate_threshold_form

logger = logging.getLogger(__name__)


def _is_absence(record) -> bool:
    return record.status == "ABSENT"


def _is_lateness(record) -> bool:
    # LATE status or the late flag on a PRESENT record, both count
    return record.status == "LATE" or bool(record.late)


def _cutoff(days: int, today: Optional[date]) -> date:
    return (today or date.today()) - timedelta(days=days)


# ==========================================================
# [counters]
# ==========================================================
def count_absences_in_period(records: Iterable, days: int, today: Optional[date] = None) -> int:
    cutoff = _cutoff(days, today)
    return sum(1 for r in records if r.date >= cutoff and _is_absence(r))


def count_absences_cumulative(records: Iterable) -> int:
    return sum(1 for r in records if _is_absence(r))


def count_lateness_in_period(records: Iterable, days: int, today: Optional[date] = None) -> int:
    cutoff = _cutoff(days, today)
    return sum(1 for r in records if r.date >= cutoff and _is_lateness(r))


def count_lateness_cumulative(records: Iterable) -> int:
    return sum(1 for r in records if _is_lateness(r))


def calculate_days_over_threshold(records: Iterable, threshold: int, kind: str) -> int:
    """Walk newest-first; every record seen once the running count reaches threshold is a day over."""
    match = _is_absence if kind == "absence" else _is_lateness
    count = days_over = 0
    for r in sorted(records, key=lambda r: r.date, reverse=True):
        if match(r):
            count += 1
        if count >= threshold:
            days_over += 1
    return days_over


def filter_records_by_date_range(records: Iterable, start: date, end: date) -> List:
    return [r for r in records if start <= r.date <= end]


# ==========================================================
# [evaluation]
# ==========================================================
def calculate_student_alerts(student_id: str, records: Iterable, thresholds: ThresholdSet,
                             today: Optional[date] = None) -> AlertResult:
    own = [r for r in records if r.student_id == student_id]

    counts = {
        "absences_30_day": count_absences_in_period(own, THIRTY_DAYS, today),
        "absences_cumulative": count_absences_cumulative(own),
        "lateness_30_day": count_lateness_in_period(own, THIRTY_DAYS, today),
        "lateness_cumulative": count_lateness_cumulative(own),
    }
    checks = (
        ("absences_30_day", AlertType.ABSENCE, AlertPeriod.THIRTY_DAYS),
        ("absences_cumulative", AlertType.ABSENCE, AlertPeriod.CUMULATIVE),
        ("lateness_30_day", AlertType.LATENESS, AlertPeriod.THIRTY_DAYS),
        ("lateness_cumulative", AlertType.LATENESS, AlertPeriod.CUMULATIVE),
    )

    triggered = []
    for field, alert_type, period in checks:
        limit = getattr(thresholds, field)
        if counts[field] >= limit:
            triggered.append(TriggeredAlert(
                type=alert_type, period=period, current_count=counts[field], threshold_count=limit,
            ))

    return AlertResult(student_id=student_id, thresholds=thresholds, triggered_alerts=triggered, **counts)


def calculate_batch_alerts(student_ids: Sequence[str], records: Iterable, thresholds: ThresholdSet,
                           today: Optional[date] = None) -> List[AlertResult]:
    records = list(records)
    return [calculate_student_alerts(sid, records, thresholds, today) for sid in student_ids]


def get_attendance_trend(records: Iterable, days: int = 14, today: Optional[date] = None) -> AttendanceTrend:
    """Attendance over the last N days; attended = PRESENT or LATE status."""
    cutoff = _cutoff(days, today)
    recent = [r for r in records if r.date >= cutoff]

    total = len(recent)
    present = sum(1 for r in recent if r.status == "PRESENT")
    late_status = sum(1 for r in recent if r.status == "LATE")
    rate = (present + late_status) / total * 100 if total else 0.0

    return AttendanceTrend(
        total_days=total,
        present_days=present,
        absent_days=sum(1 for r in recent if _is_absence(r)),
        late_days=sum(1 for r in recent if _is_lateness(r)),
        attendance_rate=round(rate, 2),
    )


def is_approaching_threshold(result: AlertResult, warning_buffer: int = 2) -> ApproachingFlags:
    t = result.thresholds
    return ApproachingFlags(
        absences_30_day=result.absences_30_day >= t.absences_30_day - warning_buffer,
        absences_cumulative=result.absences_cumulative >= t.absences_cumulative - warning_buffer,
        lateness_30_day=result.lateness_30_day >= t.lateness_30_day - warning_buffer,
        lateness_cumulative=result.lateness_cumulative >= t.lateness_cumulative - warning_buffer,
    )


# ==========================================================
# [service]
# ==========================================================
class AlertService:
    def __init__(self, db: Session):
        self.db = db
        self.attendance = AttendanceRepository(db)
        self.students = StudentRepository(db)
        self.thresholds = ThresholdRepository(db)

    def get_thresholds(self) -> ThresholdSet:
        return ThresholdSet.model_validate(self.thresholds.get())

    def update_thresholds(self, values: Dict) -> ThresholdSet:
        result = validate_threshold_form(values)
        if not result.is_valid:
            raise BusinessRuleError(
                "Threshold settings are invalid",
                details={"errors": result.errors, "field_errors": result.field_errors},
            )
        if result.warnings:
            logger.info("threshold update warnings: %s", "; ".join(result.warnings))
        saved = self.thresholds.save({k: int(v) for k, v in result.data.items()})
        return ThresholdSet.model_validate(saved)

    def evaluate_all(self, today: Optional[date] = None,
                     only_triggered: bool = False) -> List[StudentAlertSummary]:
        thresholds = self.get_thresholds()
        students = self.students.list()
        records = self.attendance.all()
        results = calculate_batch_alerts([s.id for s in students], records, thresholds, today)

        out = []
        for student, result in zip(students, results):
            if only_triggered and not result.triggered_alerts:
                continue
            out.append(StudentAlertSummary(
                student_id=student.id,
                student_name=student.full_name,
                result=result,
                approaching=is_approaching_threshold(result, settings.ALERT_WARNING_BUFFER),
            ))
        return out

    def evaluate_student(self, student_id: str, today: Optional[date] = None) -> StudentAlertSummary:
        student = self.students.get(student_id)
        if student is None:
            raise NotFoundError(f"Student {student_id} not found")
        result = calculate_student_alerts(
            student_id, self.attendance.list(student_id=student_id), self.get_thresholds(), today
        )
        return StudentAlertSummary(
            student_id=student.id,
            student_name=student.full_name,
            result=result,
            approaching=is_approaching_threshold(result, settings.ALERT_WARNING_BUFFER),
        )

    def student_trend(self, student_id: str, days: int = 14, today: Optional[date] = None) -> AttendanceTrend:
        if self.students.get(student_id) is None:
            raise NotFoundError(f"Student {student_id} not found")
        return get_attendance_trend(self.attendance.list(student_id=student_id), days, today)
