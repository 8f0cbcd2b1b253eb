"""
validators/report_filters.py

Pure validators for report filter input.
Every function returns a ValidationResult; nothing here touches the database.
"""

import re
from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional

from pydantic import ValidationError

from config.constants import (
    DATE_PATTERN,
    LARGE_DATE_RANGE_DAYS,
    LARGE_PAGE_WARNING,
    MAX_DATE_RANGE_DAYS,
    RECENT_DATA_DAYS,
    SEARCH_MIN_LENGTH,
    VALIDATION_PAGE_LIMIT,
)
from schemas.enums import AttendanceStatus
from schemas.reports import ReportFilter
from validators.common import ValidationResult, pydantic_errors

_UNSAFE_CHARS = re.compile(r"[<>\"'%;()&+]")
_MAX_INPUT_LENGTH = 1000
_MAX_STUDENT_ID_LENGTH = 50


def _as_date(value) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and DATE_PATTERN.match(value):
        try:
            return datetime.strptime(value, "%Y-%m-%d").date()
        except ValueError:
            return None
    return None


def validate_date_string(value: Any) -> ValidationResult:
    result = ValidationResult()
    if not isinstance(value, (str, date)) or (isinstance(value, str) and not DATE_PATTERN.match(value)):
        result.add_error("Date must be in YYYY-MM-DD format", "date")
        return result
    parsed = _as_date(value)
    if parsed is None:
        result.add_error("Invalid calendar date", "date")
        return result
    result.data = parsed
    return result


def validate_date_range(start: Any, end: Any, today: Optional[date] = None) -> ValidationResult:
    today = today or date.today()
    result = ValidationResult()

    start_check, end_check = validate_date_string(start), validate_date_string(end)
    if not start_check.is_valid:
        result.add_error(f"Start date: {start_check.errors[0]}", "date_from")
    if not end_check.is_valid:
        result.add_error(f"End date: {end_check.errors[0]}", "date_to")
    if not result.is_valid:
        return result

    start_date, end_date = start_check.data, end_check.data
    if start_date > end_date:
        result.add_error("Start date must be before end date", "date_from")
        return result
    if (end_date - start_date).days > MAX_DATE_RANGE_DAYS:
        result.add_error("Date range cannot exceed 1 year", "date_to")
        return result
    if end_date > today:
        result.add_error("Dates cannot be in the future", "date_to")
        return result

    if end_date > today - timedelta(days=RECENT_DATA_DAYS):
        result.warnings.append("Recent dates may have incomplete attendance data")
    if (end_date - start_date).days > LARGE_DATE_RANGE_DAYS:
        result.warnings.append("Large date range may result in slow queries")

    result.data = {"start": start_date, "end": end_date}
    return result


def validate_pagination(page: Any, limit: Any) -> ValidationResult:
    result = ValidationResult()
    if not isinstance(page, int) or isinstance(page, bool) or page < 1:
        result.add_error("Page number must be at least 1", "page")
    if not isinstance(limit, int) or isinstance(limit, bool) or limit < 1:
        result.add_error("Page size must be at least 1", "limit")
    elif limit > VALIDATION_PAGE_LIMIT:
        result.add_error(f"Page size cannot exceed {VALIDATION_PAGE_LIMIT} items", "limit")
    if not result.is_valid:
        return result

    if limit > LARGE_PAGE_WARNING:
        result.warnings.append("Large page sizes may impact performance")
    result.data = {"page": page, "limit": limit}
    return result


def validate_attendance_status(value: Any) -> ValidationResult:
    result = ValidationResult()
    if not isinstance(value, str):
        result.add_error("Attendance status must be a string", "status")
        return result
    normalized = value.strip().upper()
    if normalized not in AttendanceStatus.__members__:
        result.add_error(f"Invalid attendance status: {value}", "status")
        return result
    result.data = AttendanceStatus(normalized)
    return result


def is_valid_student_selection(student_ids: Any) -> bool:
    if not isinstance(student_ids, (list, tuple)):
        return False
    return all(
        isinstance(sid, str) and sid.strip() and len(sid) <= _MAX_STUDENT_ID_LENGTH
        for sid in student_ids
    )


def sanitize_filter_input(value: Any) -> Any:
    """Strip markup-ish characters from strings (recursively through dicts/lists); other values pass through."""
    if isinstance(value, str):
        return _UNSAFE_CHARS.sub("", value.strip())[:_MAX_INPUT_LENGTH]
    if isinstance(value, dict):
        return {k: sanitize_filter_input(v) for k, v in value.items()}
    if isinstance(value, list):
        return [sanitize_filter_input(v) for v in value]
    return value


def validate_report_filters(raw: Dict[str, Any], today: Optional[date] = None) -> ValidationResult:
    """Schema check via ReportFilter, then business rules on the parsed filter."""
    result = ValidationResult()
    try:
        filters = ReportFilter.model_validate(raw or {})
    except ValidationError as exc:
        for field, messages in pydantic_errors(exc).items():
            for message in messages:
                result.add_error(f"{field}: {message}", field)
        return result

    if filters.student_ids is not None:
        if not filters.student_ids:
            result.warnings.append("No specific students selected")
        elif not is_valid_student_selection(filters.student_ids):
            result.add_error("Student selection contains invalid IDs", "student_ids")

    for field in ("student_name", "last_name"):
        term = getattr(filters, field)
        if term is not None and len(term.strip()) < SEARCH_MIN_LENGTH:
            result.add_error(f"Search query requires at least {SEARCH_MIN_LENGTH} characters", field)

    if filters.statuses is not None and not filters.statuses:
        result.warnings.append("No attendance statuses selected - results may be empty")

    if filters.date_from and filters.date_to:
        result.merge(validate_date_range(filters.date_from, filters.date_to, today))
    else:
        # one-sided ranges still cannot reach into the future
        for field in ("date_from", "date_to"):
            bound = getattr(filters, field)
            if bound and bound > (today or date.today()):
                result.add_error("Dates cannot be in the future", field)
    if filters.date and filters.date > (today or date.today()):
        result.add_error("Dates cannot be in the future", "date")

    if result.is_valid:
        result.data = filters
    return result
