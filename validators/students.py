from typing import Any, Dict, Iterable, Optional

from config.constants import (
    ALLOWED_GRADES,
    GRADE_MAX_LENGTH,
    MAX_ID_NUMBER,
    NAME_MAX_LENGTH,
    NAME_PATTERN,
    STUDENT_ID_PATTERN,
    STUDENT_ID_PREFIX,
    STUDENT_MESSAGES,
)
from validators.common import ValidationResult


def validate_student_id(student_id: Optional[str], existing_ids: Iterable[str] = ()) -> ValidationResult:
    result = ValidationResult()
    value = (student_id or "").strip()
    if not value:
        result.add_error(STUDENT_MESSAGES["ID_REQUIRED"], "id")
    elif not STUDENT_ID_PATTERN.match(value):
        result.add_error(STUDENT_MESSAGES["ID_INVALID_FORMAT"], "id")
    elif value in set(existing_ids):
        result.add_error(STUDENT_MESSAGES["ID_NOT_UNIQUE"], "id")
    else:
        result.data = value
    return result


def _check_name(value: Optional[str], prefix: str, field: str, result: ValidationResult) -> None:
    value = (value or "").strip()
    if not value:
        result.add_error(STUDENT_MESSAGES[f"{prefix}_REQUIRED"], field)
    elif len(value) > NAME_MAX_LENGTH:
        result.add_error(STUDENT_MESSAGES[f"{prefix}_TOO_LONG"], field)
    elif not NAME_PATTERN.match(value):
        result.add_error(STUDENT_MESSAGES[f"{prefix}_INVALID_CHARS"], field)


def validate_student_name(first_name: Optional[str], last_name: Optional[str]) -> ValidationResult:
    result = ValidationResult()
    _check_name(first_name, "FIRST_NAME", "first_name", result)
    _check_name(last_name, "LAST_NAME", "last_name", result)
    return result


def is_valid_grade(grade: Optional[str], required: bool = False) -> bool:
    if grade is None or not str(grade).strip():
        return not required
    value = str(grade).strip()
    return len(value) <= GRADE_MAX_LENGTH and value in ALLOWED_GRADES


def generate_next_student_id(existing_ids: Iterable[str]) -> str:
    numbers = [int(i[len(STUDENT_ID_PREFIX):]) for i in existing_ids if STUDENT_ID_PATTERN.match(i or "")]
    next_number = min((max(numbers) if numbers else 0) + 1, MAX_ID_NUMBER)
    return f"{STUDENT_ID_PREFIX}{next_number:03d}"


def validate_student_form(form: Dict[str, Any], existing_ids: Iterable[str] = (),
                          check_id: bool = True) -> ValidationResult:
    result = validate_student_name(form.get("first_name"), form.get("last_name"))
    if check_id and form.get("id") is not None:
        result.merge(validate_student_id(form.get("id"), existing_ids))
    if not is_valid_grade(form.get("grade")):
        result.add_error(STUDENT_MESSAGES["GRADE_INVALID"], "grade")
    if result.is_valid:
        result.data = {
            "id": (form.get("id") or "").strip() or None,
            "first_name": form["first_name"].strip(),
            "last_name": form["last_name"].strip(),
            "grade": (form.get("grade") or "").strip() or None,
        }
    return result
