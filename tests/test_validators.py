from datetime import date

from schemas.enums import AttendanceStatus
from validators.classes import generate_next_class_id, sanitize_class_input, validate_class_form, validate_class_name
from validators.report_filters import (
    is_valid_student_selection,
    sanitize_filter_input,
    validate_attendance_status,
    validate_date_range,
    validate_date_string,
    validate_pagination,
    validate_report_filters,
)
from validators.students import (
    generate_next_student_id,
    is_valid_grade,
    validate_student_form,
    validate_student_id,
)
from validators.thresholds import (
    sanitize_threshold_input,
    validate_threshold_form,
    validate_threshold_logic,
    validate_threshold_value,
)

TODAY = date(2024, 3, 15)

DEFAULTS = {"absences_30_day": 5, "absences_cumulative": 15, "lateness_30_day": 8, "lateness_cumulative": 20}


# ==========================================================
# thresholds
# ==========================================================
def test_threshold_defaults_are_valid():
    result = validate_threshold_form(DEFAULTS)
    assert result.is_valid
    assert result.warnings == []
    assert result.data == DEFAULTS


def test_threshold_cumulative_must_exceed_window():
    result = validate_threshold_form({**DEFAULTS, "absences_30_day": 10, "absences_cumulative": 10})
    assert not result.is_valid
    assert "Cumulative absence threshold should be higher than 30-day threshold" in result.errors
    assert result.field_errors["absences_cumulative"] == ["Should be higher than 30-day threshold"]


def test_threshold_missing_field():
    form = dict(DEFAULTS)
    del form["lateness_30_day"]
    result = validate_threshold_form(form)
    assert not result.is_valid
    assert "This field is required: 30-Day Lateness" in result.errors
    assert result.field_errors["lateness_30_day"] == ["This field is required"]


def test_threshold_value_messages():
    assert validate_threshold_value("abc", 30).errors == ["Must be a valid number"]
    assert validate_threshold_value(2.5, 30).errors == ["Threshold must be a whole number"]
    assert validate_threshold_value(0, 30).errors == ["Threshold must be at least 1"]
    assert validate_threshold_value(31, 30).errors == ["Monthly threshold cannot exceed 30"]
    assert validate_threshold_value(101, 100).errors == ["Cumulative threshold cannot exceed 100"]
    assert validate_threshold_value("7", 30).data == 7


def test_threshold_drift_warns_without_blocking():
    result = validate_threshold_form({**DEFAULTS, "absences_30_day": 11})
    assert result.is_valid
    assert result.warnings == ["30-day absence threshold differs significantly from recommended default"]


def test_sanitize_threshold_input():
    assert sanitize_threshold_input(DEFAULTS) == DEFAULTS
    cleaned = sanitize_threshold_input({
        "absences_30_day": "x", "absences_cumulative": 250, "lateness_30_day": -3, "lateness_cumulative": "12",
    })
    assert cleaned == {"absences_30_day": 5, "absences_cumulative": 100, "lateness_30_day": 8,
                       "lateness_cumulative": 12}


def test_threshold_logic():
    assert validate_threshold_logic(DEFAULTS).is_valid
    result = validate_threshold_logic({**DEFAULTS, "absences_30_day": 1})
    assert result.field_errors["absences_30_day"] == [
        "30-day absence threshold seems too low (would generate excessive alerts)"
    ]


# ==========================================================
# report filters
# ==========================================================
def test_date_string():
    assert validate_date_string("2024-02-29").data == date(2024, 2, 29)
    assert validate_date_string("2023-02-29").errors == ["Invalid calendar date"]
    assert validate_date_string("03/01/2024").errors == ["Date must be in YYYY-MM-DD format"]


def test_date_range_rules():
    assert validate_date_range("2024-03-10", "2024-03-01", TODAY).errors == ["Start date must be before end date"]
    assert validate_date_range("2023-01-01", "2024-03-01", TODAY).errors == ["Date range cannot exceed 1 year"]
    assert validate_date_range("2024-03-01", "2024-03-20", TODAY).errors == ["Dates cannot be in the future"]

    recent = validate_date_range("2024-01-01", "2024-03-14", TODAY)
    assert recent.is_valid
    assert recent.warnings == ["Recent dates may have incomplete attendance data"]

    wide = validate_date_range("2023-10-01", "2024-03-01", TODAY)
    assert wide.warnings == ["Large date range may result in slow queries"]


def test_pagination_rules():
    assert validate_pagination(1, 20).is_valid
    assert validate_pagination(1, 1001).errors == ["Page size cannot exceed 1000 items"]
    assert validate_pagination(0, 20).errors == ["Page number must be at least 1"]
    large = validate_pagination(1, 200)
    assert large.is_valid
    assert large.warnings == ["Large page sizes may impact performance"]


def test_attendance_status():
    assert validate_attendance_status(" late ").data == AttendanceStatus.LATE
    assert not validate_attendance_status("SICK").is_valid
    assert not validate_attendance_status(3).is_valid


def test_student_selection_and_sanitizing():
    assert is_valid_student_selection(["STU001", "STU002"])
    assert not is_valid_student_selection(["STU001", " "])
    assert not is_valid_student_selection("STU001")

    raw = {"last_name": " <Smith> ", "student_ids": ["STU001;", "(STU002)"], "only_late": True}
    assert sanitize_filter_input(raw) == {
        "last_name": "Smith", "student_ids": ["STU001", "STU002"], "only_late": True,
    }


def test_report_filter_rules():
    short = validate_report_filters({"last_name": "S"}, TODAY)
    assert short.field_errors["last_name"] == ["Search query requires at least 2 characters"]

    empty_lists = validate_report_filters({"student_ids": [], "statuses": []}, TODAY)
    assert empty_lists.is_valid
    assert empty_lists.warnings == [
        "No specific students selected",
        "No attendance statuses selected - results may be empty",
    ]

    assert not validate_report_filters({"colour": "red"}, TODAY).is_valid
    assert not validate_report_filters({"date": "2024-04-01"}, TODAY).is_valid

    ok = validate_report_filters({"last_name": "Smith", "date_from": "2024-01-01", "date_to": "2024-02-01"}, TODAY)
    assert ok.is_valid
    assert ok.data.last_name == "Smith"


def test_single_date_bound_cannot_be_in_the_future():
    end_only = validate_report_filters({"date_to": "2024-04-01"}, TODAY)
    assert end_only.field_errors == {"date_to": ["Dates cannot be in the future"]}

    start_only = validate_report_filters({"date_from": "2024-03-16"}, TODAY)
    assert start_only.field_errors == {"date_from": ["Dates cannot be in the future"]}

    assert validate_report_filters({"date_to": "2024-03-15"}, TODAY).is_valid


# ==========================================================
# students / classes
# ==========================================================
def test_student_id_rules():
    assert validate_student_id("STU001").data == "STU001"
    assert validate_student_id("STU1").errors == ["Student ID must follow format STU001"]
    assert validate_student_id("STU001", ["STU001"]).errors == ["Student ID already exists"]
    assert validate_student_id("").errors == ["Student ID is required"]


def test_next_student_id():
    assert generate_next_student_id([]) == "STU001"
    assert generate_next_student_id(["STU001", "STU007", "legacy"]) == "STU008"
    assert generate_next_student_id(["STU999"]) == "STU999"


def test_student_form():
    ok = validate_student_form({"first_name": " Ann ", "last_name": "O'Neil", "grade": "5"})
    assert ok.is_valid
    assert ok.data == {"id": None, "first_name": "Ann", "last_name": "O'Neil", "grade": "5"}

    bad = validate_student_form({"first_name": "J0hn", "last_name": "", "grade": "13"})
    assert bad.field_errors == {
        "first_name": ["First name contains invalid characters"],
        "last_name": ["Last name is required"],
        "grade": ["Invalid grade selection"],
    }
    assert is_valid_grade(None)
    assert not is_valid_grade(None, required=True)


def test_class_validators():
    assert validate_class_name("A").errors == ["Class name must be at least 2 characters"]
    assert validate_class_form({"name": "Math", "id": "CLS1"}).field_errors == {
        "id": ["Class ID must follow format CLS001"]
    }
    assert generate_next_class_id(["CLS002", "CLS010"]) == "CLS011"
    assert sanitize_class_input({"name": " Math ", "teacher": "  "}) == {"name": "Math", "teacher": None}
