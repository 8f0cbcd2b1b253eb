"""
services/report_service.py

Attendance report aggregator.
- Filters attendance records in a fixed narrowing order, then computes per-student and
  per-date statistics, a summary block and heuristic insights.
- Results are cached in services.report_cache keyed by the canonical request encoding.

The statistics helpers below are plain functions over record objects exposing
student_id / date / status / late / early_dismissal / excused, so they work on ORM rows
and on lightweight test doubles alike.
"""

import csv
import io
import logging
import time
import uuid
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from config.constants import (
    HIGH_LATE_RATE,
    OVERALL_ATTENDANCE_TARGET,
    RELATIVE_PERIODS,
    RISK_ATTENDANCE_RATE,
    SEVERE_ATTENDANCE_RATE,
    TREND_DELTA,
    TREND_MIN_RECORDS,
)
from models.report_configs import SavedReportConfig as ReportConfigModel
from repositories.attendance_repo import AttendanceRepository
from repositories.report_config_repo import ReportConfigRepository
from repositories.student_repo import StudentRepository
from schemas.common import make_pagination
from schemas.reports import (
    AlertStudent,
    DateAttendanceStats,
    DateRangeInfo,
    OverallStats,
    PaginationRequest,
    QueryMetrics,
    ReportFilter,
    ReportInsights,
    ReportQuery,
    ReportRecord,
    ReportRequest,
    ReportResult,
    ReportSummary,
    SortOptions,
    StudentAttendanceStats,
    SummaryTrends,
)
from services.exceptions import NotFoundError
from services.report_cache import ReportCache, make_cache_key, report_cache

logger = logging.getLogger(__name__)

PRESENT, LATE, ABSENT, EXCUSED = "PRESENT", "LATE", "ABSENT", "EXCUSED"


# ==========================================================
# [helpers] record predicates / rates
# ==========================================================
def _is_tardy(record) -> bool:
    return record.status == LATE or bool(record.late)


def _rate(part: int, total: int) -> int:
    return round(part / total * 100) if total else 0


def _student_name(student) -> str:
    return f"{student.first_name} {student.last_name}" if student else "Unknown"


# ==========================================================
# [1] filtering
# ==========================================================
def relative_window(period: str, today: Optional[date] = None):
    """(start, end) dates covered by a relative period, both inclusive."""
    today = today or date.today()
    return today - timedelta(days=RELATIVE_PERIODS[period]), today


def apply_filters(records: Iterable, students: Dict[str, object], filters: ReportFilter,
                  today: Optional[date] = None) -> List:
    """Each populated filter key narrows the previous result; a missing key is no restriction."""
    today = today or date.today()
    result = list(records)

    if filters.student_ids:
        wanted = set(filters.student_ids)
        result = [r for r in result if r.student_id in wanted]

    if filters.student_name:
        needle = filters.student_name.strip().lower()
        result = [
            r for r in result
            if r.student_id in students and needle in _student_name(students[r.student_id]).lower()
        ]

    if filters.last_name:
        needle = filters.last_name.strip().lower()
        result = [
            r for r in result
            if r.student_id in students and needle in (students[r.student_id].last_name or "").lower()
        ]

    if filters.date:
        result = [r for r in result if r.date == filters.date]

    if filters.date_from:
        result = [r for r in result if r.date >= filters.date_from]
    if filters.date_to:
        result = [r for r in result if r.date <= filters.date_to]

    if filters.relative_period:
        start, end = relative_window(filters.relative_period, today)
        result = [r for r in result if start <= r.date <= end]

    if filters.status:
        result = [r for r in result if r.status == filters.status]

    if filters.statuses:
        allowed = set(filters.statuses)
        result = [r for r in result if r.status in allowed]

    if filters.only_late:
        result = [r for r in result if _is_tardy(r)]

    if filters.only_early_dismissal:
        result = [r for r in result if r.early_dismissal]

    if filters.include_excused is False:
        result = [r for r in result if not (r.excused or r.status == EXCUSED)]

    return result


# ==========================================================
# [2] per-student statistics
# ==========================================================
def classify_trend(records: Sequence) -> str:
    """Compare the present-rate of the first and second chronological halves."""
    if len(records) < TREND_MIN_RECORDS:
        return "stable"

    ordered = sorted(records, key=lambda r: r.date)
    mid = len(ordered) // 2
    first, second = ordered[:mid], ordered[mid:]
    first_rate = sum(1 for r in first if r.status == PRESENT) / len(first)
    second_rate = sum(1 for r in second if r.status == PRESENT) / len(second)

    diff = second_rate - first_rate
    if diff > TREND_DELTA:
        return "improving"
    if diff < -TREND_DELTA:
        return "declining"
    return "stable"


def consecutive_absences(records: Sequence) -> int:
    count = 0
    for r in sorted(records, key=lambda r: r.date, reverse=True):
        if r.status != ABSENT:
            break
        count += 1
    return count


def longest_present_streak(records: Sequence) -> int:
    best = current = 0
    for r in sorted(records, key=lambda r: r.date):
        if r.status == PRESENT:
            current += 1
            best = max(best, current)
        else:
            current = 0
    return best


def build_student_stats(records: Sequence, students: Dict[str, object]) -> List[StudentAttendanceStats]:
    grouped: Dict[str, list] = defaultdict(list)
    for r in records:
        grouped[r.student_id].append(r)

    stats = []
    for student_id in sorted(grouped):
        rows = grouped[student_id]
        student = students.get(student_id)
        total = len(rows)
        present = sum(1 for r in rows if r.status == PRESENT)
        tardy = sum(1 for r in rows if _is_tardy(r))
        stats.append(StudentAttendanceStats(
            student_id=student_id,
            student_name=_student_name(student),
            grade=getattr(student, "grade", None),
            total_days=total,
            present_days=present,
            late_days=sum(1 for r in rows if r.status == LATE),
            absent_days=sum(1 for r in rows if r.status == ABSENT),
            excused_days=sum(1 for r in rows if r.status == EXCUSED),
            tardy_days=tardy,
            early_dismissals=sum(1 for r in rows if r.early_dismissal),
            attendance_rate=_rate(present, total),
            late_rate=_rate(tardy, total),
            consecutive_absences=consecutive_absences(rows),
            longest_present_streak=longest_present_streak(rows),
            last_attendance_date=max(r.date for r in rows),
            average_weekly_attendance=round(present / total * 5) if total else 0,
            trend=classify_trend(rows),
        ))
    return stats


# ==========================================================
# [3] per-date statistics / summary / insights
# ==========================================================
def build_date_stats(records: Sequence) -> List[DateAttendanceStats]:
    grouped: Dict[date, list] = defaultdict(list)
    for r in records:
        grouped[r.date].append(r)

    out = []
    for day in sorted(grouped):
        rows = grouped[day]
        total = len(rows)
        present = sum(1 for r in rows if r.status == PRESENT)
        tardy = sum(1 for r in rows if _is_tardy(r))
        out.append(DateAttendanceStats(
            date=day,
            total_students=total,
            present_students=present,
            late_students=sum(1 for r in rows if r.status == LATE),
            absent_students=sum(1 for r in rows if r.status == ABSENT),
            excused_students=sum(1 for r in rows if r.status == EXCUSED),
            tardy_students=tardy,
            attendance_rate=_rate(present, total),
            late_rate=_rate(tardy, total),
        ))
    return out


def build_summary(records: Sequence, student_stats: List[StudentAttendanceStats]) -> ReportSummary:
    total = len(records)
    dates = sorted({r.date for r in records})
    present = sum(1 for r in records if r.status == PRESENT)
    tardy = sum(1 for r in records if _is_tardy(r))

    return ReportSummary(
        total_students=len({r.student_id for r in records}),
        total_records=total,
        date_range=DateRangeInfo(
            start=dates[0] if dates else None,
            end=dates[-1] if dates else None,
            total_days=len(dates),
        ),
        overall_stats=OverallStats(
            average_attendance_rate=_rate(present, total),
            average_late_rate=_rate(tardy, total),
            total_present_days=present,
            total_late_days=sum(1 for r in records if r.status == LATE),
            total_absent_days=sum(1 for r in records if r.status == ABSENT),
            total_excused_days=sum(1 for r in records if r.status == EXCUSED),
            total_tardy_days=tardy,
        ),
        trends=SummaryTrends(
            attendance_direction=classify_trend(records),
            risk_students=sum(1 for s in student_stats if s.attendance_rate < RISK_ATTENDANCE_RATE),
            perfect_attendance=sum(1 for s in student_stats if s.attendance_rate == 100),
        ),
    )


def build_insights(summary: ReportSummary, student_stats: List[StudentAttendanceStats]) -> ReportInsights:
    insights = ReportInsights()
    overall = summary.overall_stats.average_attendance_rate

    if summary.total_records and overall < OVERALL_ATTENDANCE_TARGET:
        insights.key_findings.append(
            f"Overall attendance rate of {overall}% is below recommended {OVERALL_ATTENDANCE_TARGET}% threshold"
        )
        insights.recommendations.append("Consider implementing attendance intervention programs")

    risk = [s for s in student_stats if s.attendance_rate < RISK_ATTENDANCE_RATE]
    if risk:
        insights.key_findings.append(
            f"{len(risk)} students have attendance rates below {RISK_ATTENDANCE_RATE}%"
        )
        insights.recommendations.append("Schedule meetings with at-risk students and their families")
        for s in risk:
            insights.alert_students.append(AlertStudent(
                student_id=s.student_id,
                student_name=s.student_name,
                severity="high" if s.attendance_rate < SEVERE_ATTENDANCE_RATE else "medium",
                description=f"Attendance rate: {s.attendance_rate}%",
            ))

    late = [s for s in student_stats if s.late_rate > HIGH_LATE_RATE]
    if late:
        insights.key_findings.append(f"{len(late)} students have tardiness rates above {HIGH_LATE_RATE}%")
        insights.recommendations.append(
            "Review morning routines and transportation options with frequently late students"
        )

    return insights


# ==========================================================
# [4] sorting / request metadata
# ==========================================================
_SORT_KEYS = {
    "name": lambda rec: rec.student_name.lower(),
    "date": lambda rec: rec.date,
    "status": lambda rec: rec.status,
    "grade": lambda rec: (rec.grade or "").lower(),
}


def sort_records(records: List[ReportRecord], sort: Optional[SortOptions]) -> List[ReportRecord]:
    if not sort:
        return records
    return sorted(records, key=_SORT_KEYS[sort.sort_by], reverse=sort.sort_order == "desc")


def query_complexity(filters: ReportFilter, pagination, sort) -> str:
    score = 0
    if filters.student_ids:
        score += 1
    if filters.date_from or filters.date_to:
        score += 1
    if filters.statuses:
        score += 1
    if sort:
        score += 1
    if pagination:
        score += 1
    if score <= 2:
        return "simple"
    if score <= 4:
        return "moderate"
    return "complex"


def optimization_suggestions(filters: ReportFilter, execution_ms: int) -> List[str]:
    suggestions = []
    if execution_ms > 1000:
        suggestions.append("Consider using pagination for large result sets")
    if filters.student_name and not filters.student_ids:
        suggestions.append("Use specific student IDs instead of name search for better performance")
    return suggestions


def report_type(filters: ReportFilter) -> str:
    if filters.only_late:
        return "tardiness"
    if len(filters.model_dump(exclude_none=True)) <= 1:
        return "summary"
    return "attendance"


def _to_report_record(record, students: Dict[str, object]) -> ReportRecord:
    student = students.get(record.student_id)
    return ReportRecord(
        id=f"{record.student_id}-{record.date.isoformat()}",
        student_id=record.student_id,
        student_name=_student_name(student),
        student_first_name=getattr(student, "first_name", "") or "",
        student_last_name=getattr(student, "last_name", "") or "",
        grade=getattr(student, "grade", None),
        date=record.date,
        status=record.status,
        late=bool(record.late),
        early_dismissal=bool(record.early_dismissal),
        excused=bool(record.excused),
    )


# ==========================================================
# [5] service
# ==========================================================
class ReportService:
    def __init__(self, db: Session, cache: Optional[ReportCache] = None):
        self.db = db
        self.cache = cache if cache is not None else report_cache
        self.attendance = AttendanceRepository(db)
        self.students = StudentRepository(db)
        self.configs = ReportConfigRepository(db)

    def _students_by_id(self) -> Dict[str, object]:
        return {s.id: s for s in self.students.list()}

    def filtered_records(self, filters: ReportFilter, today: Optional[date] = None):
        """Filtered ORM rows plus the student lookup used to produce them."""
        students = self._students_by_id()
        records = self.attendance.all()
        return records, apply_filters(records, students, filters, today), students

    def generate_report(self, filters: Optional[ReportFilter] = None,
                        pagination: Optional[PaginationRequest] = None,
                        sort: Optional[SortOptions] = None,
                        use_cache: bool = True,
                        today: Optional[date] = None) -> ReportResult:
        started = time.perf_counter()
        filters = filters or ReportFilter()
        key_filters = filters.model_dump(mode="json", exclude_none=True)
        if filters.relative_period:
            # same period, different dates on another day
            start, end = relative_window(filters.relative_period, today)
            key_filters["window"] = [start.isoformat(), end.isoformat()]
        key = make_cache_key(
            key_filters,
            pagination.model_dump() if pagination else None,
            sort.model_dump() if sort else None,
        )

        if use_cache:
            cached = self.cache.get(key)
            if cached is not None:
                logger.info("report cache hit (%s records)", cached.summary.total_records)
                metrics = cached.metrics.model_copy(update={
                    "cache_hit": True,
                    "execution_time_ms": int((time.perf_counter() - started) * 1000),
                })
                return cached.model_copy(update={"metrics": metrics})

        all_records, filtered, students = self.filtered_records(filters, today)

        student_stats = build_student_stats(filtered, students)
        summary = build_summary(filtered, student_stats)
        rows = sort_records([_to_report_record(r, students) for r in filtered], sort)

        page_info = None
        if pagination:
            page_info = make_pagination(len(rows), pagination.page, pagination.limit)
            offset = (pagination.page - 1) * pagination.limit
            rows = rows[offset:offset + pagination.limit]

        elapsed = int((time.perf_counter() - started) * 1000)
        result = ReportResult(
            records=rows,
            student_stats=student_stats,
            date_stats=build_date_stats(filtered),
            summary=summary,
            insights=build_insights(summary, student_stats),
            pagination=page_info,
            metrics=QueryMetrics(
                execution_time_ms=elapsed,
                records_processed=len(all_records),
                records_filtered=len(filtered),
                cache_hit=False,
                query_complexity=query_complexity(filters, pagination, sort),
                optimization_suggestions=optimization_suggestions(filters, elapsed),
            ),
            query=ReportQuery(filters=filters.model_dump(mode="json", exclude_none=True), hash=key),
            report_type=report_type(filters),
            generated_at=datetime.now(timezone.utc),
        )

        if use_cache:
            self.cache.set(key, result)
        return result

    def run_request(self, request: ReportRequest, today: Optional[date] = None) -> ReportResult:
        return self.generate_report(
            request.filters, request.pagination, request.sorting, request.use_cache, today
        )

    # ==========================================================
    # [export]
    # ==========================================================
    def export_csv(self, filters: Optional[ReportFilter] = None,
                   sort: Optional[SortOptions] = None, today: Optional[date] = None) -> str:
        """Every filtered record (unpaginated) as CSV text."""
        _, filtered, students = self.filtered_records(filters or ReportFilter(), today)
        rows = sort_records([_to_report_record(r, students) for r in filtered], sort)

        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(["Student ID", "Student Name", "Grade", "Date", "Status",
                         "Late", "Early Dismissal", "Excused"])
        for rec in rows:
            writer.writerow([
                rec.student_id, rec.student_name, rec.grade or "", rec.date.isoformat(), rec.status,
                "Yes" if rec.late else "No",
                "Yes" if rec.early_dismissal else "No",
                "Yes" if rec.excused else "No",
            ])
        return buf.getvalue()

    # ==========================================================
    # [saved configurations]
    # ==========================================================
    def save_config(self, name: str, request: ReportRequest) -> ReportConfigModel:
        config = ReportConfigModel(
            id=f"config_{uuid.uuid4().hex[:12]}",
            name=name.strip(),
            request=request.model_dump(mode="json", exclude_none=True),
        )
        return self.configs.add(config)

    def list_configs(self) -> List[ReportConfigModel]:
        return self.configs.list()

    def get_config(self, config_id: str) -> ReportConfigModel:
        config = self.configs.get(config_id)
        if config is None:
            raise NotFoundError(f"Report configuration {config_id} not found")
        return config

    def delete_config(self, config_id: str) -> None:
        self.configs.delete(self.get_config(config_id))

    def run_config(self, config_id: str, today: Optional[date] = None) -> ReportResult:
        config = self.get_config(config_id)
        return self.run_request(ReportRequest.model_validate(config.request), today)
