"""
schemas/reports.py

Request and result schemas for the report aggregator.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from config.constants import REPORT_PAGE_LIMIT
from schemas.common import PaginationInfo

StatusName = Literal["PRESENT", "LATE", "ABSENT", "EXCUSED"]
Trend = Literal["improving", "declining", "stable"]


# =========================================================
# 1) Request
# =========================================================

class ReportFilter(BaseModel):
    """
    Every key is optional; a missing key means "no restriction".
    Narrowing order: student_ids -> student_name -> last_name -> date -> date_from/date_to
    -> relative_period -> status -> statuses -> only_late -> only_early_dismissal -> include_excused
    """
    student_ids: Optional[List[str]] = None
    student_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    date: Optional[dt.date] = None
    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None
    relative_period: Optional[Literal["today", "7days", "30days", "90days"]] = None
    status: Optional[StatusName] = None
    statuses: Optional[List[StatusName]] = None
    only_late: Optional[bool] = None
    only_early_dismissal: Optional[bool] = None
    include_excused: Optional[bool] = None

    model_config = ConfigDict(extra="forbid")


class PaginationRequest(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=REPORT_PAGE_LIMIT)


class SortOptions(BaseModel):
    sort_by: Literal["name", "date", "status", "grade"] = "date"
    sort_order: Literal["asc", "desc"] = "asc"


class ReportRequest(BaseModel):
    filters: ReportFilter = Field(default_factory=ReportFilter)
    pagination: Optional[PaginationRequest] = None
    sorting: Optional[SortOptions] = None
    use_cache: bool = True


class SavedReportCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    request: ReportRequest


class SavedReport(BaseModel):
    id: str
    name: str
    request: ReportRequest
    created_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


# =========================================================
# 2) Result
# =========================================================

class ReportRecord(BaseModel):
    id: str                        # "<student_id>-<date>"
    student_id: str
    student_name: str
    student_first_name: str = ""
    student_last_name: str = ""
    grade: Optional[str] = None
    date: dt.date
    status: StatusName
    late: bool = False
    early_dismissal: bool = False
    excused: bool = False


class StudentAttendanceStats(BaseModel):
    student_id: str
    student_name: str
    grade: Optional[str] = None
    total_days: int
    present_days: int
    late_days: int
    absent_days: int
    excused_days: int
    tardy_days: int                # status LATE or late flag
    early_dismissals: int
    attendance_rate: int
    late_rate: int
    consecutive_absences: int
    longest_present_streak: int
    last_attendance_date: Optional[dt.date] = None
    average_weekly_attendance: int
    trend: Trend


class DateAttendanceStats(BaseModel):
    date: dt.date
    total_students: int
    present_students: int
    late_students: int
    absent_students: int
    excused_students: int
    tardy_students: int
    attendance_rate: int
    late_rate: int


class DateRangeInfo(BaseModel):
    start: Optional[dt.date] = None
    end: Optional[dt.date] = None
    total_days: int = 0


class OverallStats(BaseModel):
    average_attendance_rate: int
    average_late_rate: int
    total_present_days: int
    total_late_days: int
    total_absent_days: int
    total_excused_days: int
    total_tardy_days: int


class SummaryTrends(BaseModel):
    attendance_direction: Trend
    risk_students: int
    perfect_attendance: int


class ReportSummary(BaseModel):
    total_students: int
    total_records: int
    date_range: DateRangeInfo
    overall_stats: OverallStats
    trends: SummaryTrends


class AlertStudent(BaseModel):
    student_id: str
    student_name: str
    alert_type: Literal["attendance"] = "attendance"
    severity: Literal["high", "medium"]
    description: str


class ReportInsights(BaseModel):
    key_findings: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    alert_students: List[AlertStudent] = Field(default_factory=list)


class QueryMetrics(BaseModel):
    execution_time_ms: int
    records_processed: int
    records_filtered: int
    cache_hit: bool = False
    query_complexity: Literal["simple", "moderate", "complex"] = "simple"
    optimization_suggestions: List[str] = Field(default_factory=list)


class ReportQuery(BaseModel):
    filters: Dict[str, Any]
    hash: str


class ReportResult(BaseModel):
    records: List[ReportRecord]
    student_stats: List[StudentAttendanceStats]
    date_stats: List[DateAttendanceStats]
    summary: ReportSummary
    insights: ReportInsights
    pagination: Optional[PaginationInfo] = None
    metrics: QueryMetrics
    query: ReportQuery
    report_type: Literal["attendance", "tardiness", "summary"]
    generated_at: dt.datetime
