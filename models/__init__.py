# ✅ importing the package registers every table on Base.metadata
from models.attendance import AttendanceRecord
from models.classes import ClassStudent, SchoolClass
from models.report_configs import SavedReportConfig
from models.schedule import ScheduledDayOff
from models.students import Student
from models.thresholds import ThresholdSetting

__all__ = [
    "AttendanceRecord",
    "ClassStudent",
    "SavedReportConfig",
    "ScheduledDayOff",
    "SchoolClass",
    "Student",
    "ThresholdSetting",
]
