from enum import Enum


class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"
    LATE = "LATE"
    ABSENT = "ABSENT"
    EXCUSED = "EXCUSED"


class DayOffReason(str, Enum):
    HOLIDAY = "HOLIDAY"
    PROF_DEV = "PROF_DEV"
    REPORT_CARD = "REPORT_CARD"
    OTHER = "OTHER"


class AlertType(str, Enum):
    ABSENCE = "ABSENCE"
    LATENESS = "LATENESS"


class AlertPeriod(str, Enum):
    THIRTY_DAYS = "THIRTY_DAYS"
    CUMULATIVE = "CUMULATIVE"
