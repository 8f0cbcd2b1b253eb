from typing import List

from pydantic import BaseModel, ConfigDict, Field

from schemas.enums import AlertPeriod, AlertType


# ✅ threshold set (request body for PUT /alerts/thresholds and stored settings)
class ThresholdSet(BaseModel):
    absences_30_day: int = 5
    absences_cumulative: int = 15
    lateness_30_day: int = 8
    lateness_cumulative: int = 20

    model_config = ConfigDict(from_attributes=True)


class TriggeredAlert(BaseModel):
    type: AlertType
    period: AlertPeriod
    current_count: int
    threshold_count: int


class AlertResult(BaseModel):
    student_id: str
    absences_30_day: int
    absences_cumulative: int
    lateness_30_day: int
    lateness_cumulative: int
    thresholds: ThresholdSet
    triggered_alerts: List[TriggeredAlert] = Field(default_factory=list)


class ApproachingFlags(BaseModel):
    absences_30_day: bool
    absences_cumulative: bool
    lateness_30_day: bool
    lateness_cumulative: bool


class AttendanceTrend(BaseModel):
    total_days: int
    present_days: int
    absent_days: int
    late_days: int
    attendance_rate: float          # (present + late) / total * 100, 2 decimals


class StudentAlertSummary(BaseModel):
    student_id: str
    student_name: str
    result: AlertResult
    approaching: ApproachingFlags
