"""
config/constants.py

Business constants shared by validators and services.
"""

import re

# =========================================================
# Alert thresholds
# =========================================================
DEFAULT_THRESHOLDS = {
    "absences_30_day": 5,        # 5 absences in 30 days triggers an alert
    "absences_cumulative": 15,   # 15 absences for the school year
    "lateness_30_day": 8,        # 8 late arrivals in 30 days
    "lateness_cumulative": 20,   # 20 late arrivals for the school year
}

MIN_THRESHOLD = 1
MAX_THRESHOLD_30_DAY = 30
MAX_THRESHOLD_CUMULATIVE = 100

THIRTY_DAYS = 30

THRESHOLD_MESSAGES = {
    "TOO_LOW": "Threshold must be at least 1",
    "TOO_HIGH_30_DAY": "Monthly threshold cannot exceed 30",
    "TOO_HIGH_CUMULATIVE": "Cumulative threshold cannot exceed 100",
    "REQUIRED": "This field is required",
    "INVALID_NUMBER": "Must be a valid number",
    "NOT_INTEGER": "Threshold must be a whole number",
}

# =========================================================
# Reports
# =========================================================
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
MAX_DATE_RANGE_DAYS = 365
LARGE_DATE_RANGE_DAYS = 90
RECENT_DATA_DAYS = 3

REPORT_PAGE_LIMIT = 100           # API request schema
VALIDATION_PAGE_LIMIT = 1000      # standalone pagination validator
LARGE_PAGE_WARNING = 100

RISK_ATTENDANCE_RATE = 80
SEVERE_ATTENDANCE_RATE = 60
OVERALL_ATTENDANCE_TARGET = 85
HIGH_LATE_RATE = 20
TREND_MIN_RECORDS = 10
TREND_DELTA = 0.05

RELATIVE_PERIODS = {"today": 0, "7days": 7, "30days": 30, "90days": 90}

# =========================================================
# Students / classes
# =========================================================
STUDENT_ID_PATTERN = re.compile(r"^STU\d{3}$")
STUDENT_ID_PREFIX = "STU"
CLASS_ID_PATTERN = re.compile(r"^CLS\d{3}$")
CLASS_ID_PREFIX = "CLS"
MAX_ID_NUMBER = 999

NAME_PATTERN = re.compile(r"^[a-zA-Z\s\-'\.]+$")
NAME_MAX_LENGTH = 50

CLASS_NAME_MIN_LENGTH = 2
CLASS_NAME_MAX_LENGTH = 100
CLASS_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9\s\-'\.]+$")
CLASS_DESCRIPTION_MAX_LENGTH = 500

ALLOWED_GRADES = (
    "K", "1", "2", "3", "4", "5", "6", "7", "8", "9", "10", "11", "12",
    "Pre-K", "Kindergarten", "Freshman", "Sophomore", "Junior", "Senior",
)
GRADE_MAX_LENGTH = 15

MAX_STUDENTS_PER_BULK_OPERATION = 50
SEARCH_MIN_LENGTH = 2

STUDENT_MESSAGES = {
    "FIRST_NAME_REQUIRED": "First name is required",
    "FIRST_NAME_TOO_LONG": f"First name cannot exceed {NAME_MAX_LENGTH} characters",
    "FIRST_NAME_INVALID_CHARS": "First name contains invalid characters",
    "LAST_NAME_REQUIRED": "Last name is required",
    "LAST_NAME_TOO_LONG": f"Last name cannot exceed {NAME_MAX_LENGTH} characters",
    "LAST_NAME_INVALID_CHARS": "Last name contains invalid characters",
    "ID_REQUIRED": "Student ID is required",
    "ID_INVALID_FORMAT": "Student ID must follow format STU001",
    "ID_NOT_UNIQUE": "Student ID already exists",
    "GRADE_INVALID": "Invalid grade selection",
}

CLASS_MESSAGES = {
    "NAME_REQUIRED": "Class name is required",
    "NAME_TOO_SHORT": f"Class name must be at least {CLASS_NAME_MIN_LENGTH} characters",
    "NAME_TOO_LONG": f"Class name cannot exceed {CLASS_NAME_MAX_LENGTH} characters",
    "NAME_INVALID_CHARS": "Class name contains invalid characters",
    "DESCRIPTION_TOO_LONG": f"Description cannot exceed {CLASS_DESCRIPTION_MAX_LENGTH} characters",
    "ID_REQUIRED": "Class ID is required",
    "ID_INVALID_FORMAT": "Class ID must follow format CLS001",
    "ID_NOT_UNIQUE": "Class ID already exists",
    "GRADE_INVALID": "Invalid grade level",
}
