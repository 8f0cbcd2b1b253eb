from typing import Any, Dict, Iterable, Optional

from config.constants import (
    CLASS_DESCRIPTION_MAX_LENGTH,
    CLASS_ID_PATTERN,
    CLASS_ID_PREFIX,
    CLASS_MESSAGES,
    CLASS_NAME_MAX_LENGTH,
    CLASS_NAME_MIN_LENGTH,
    CLASS_NAME_PATTERN,
    MAX_ID_NUMBER,
)
from validators.common import ValidationResult
from validators.students import is_valid_grade


def validate_class_id(class_id: Optional[str], existing_ids: Iterable[str] = ()) -> ValidationResult:
    result = ValidationResult()
    value = (class_id or "").strip()
    if not value:
        result.add_error(CLASS_MESSAGES["ID_REQUIRED"], "id")
    elif not CLASS_ID_PATTERN.match(value):
        result.add_error(CLASS_MESSAGES["ID_INVALID_FORMAT"], "id")
    elif value in set(existing_ids):
        result.add_error(CLASS_MESSAGES["ID_NOT_UNIQUE"], "id")
    else:
        result.data = value
    return result


def validate_class_name(name: Optional[str], allow_special_chars: bool = True) -> ValidationResult:
    result = ValidationResult()
    value = (name or "").strip()
    if not value:
        result.add_error(CLASS_MESSAGES["NAME_REQUIRED"], "name")
    elif len(value) < CLASS_NAME_MIN_LENGTH:
        result.add_error(CLASS_MESSAGES["NAME_TOO_SHORT"], "name")
    elif len(value) > CLASS_NAME_MAX_LENGTH:
        result.add_error(CLASS_MESSAGES["NAME_TOO_LONG"], "name")
    elif not allow_special_chars and not CLASS_NAME_PATTERN.match(value):
        result.add_error(CLASS_MESSAGES["NAME_INVALID_CHARS"], "name")
    else:
        result.data = value
    return result


def validate_class_form(form: Dict[str, Any], existing_ids: Iterable[str] = ()) -> ValidationResult:
    result = validate_class_name(form.get("name"))
    if form.get("id") is not None:
        result.merge(validate_class_id(form.get("id"), existing_ids))
    if form.get("grade") and not is_valid_grade(form.get("grade")):
        result.add_error(CLASS_MESSAGES["GRADE_INVALID"], "grade")
    if form.get("description") and len(form["description"].strip()) > CLASS_DESCRIPTION_MAX_LENGTH:
        result.add_error(CLASS_MESSAGES["DESCRIPTION_TOO_LONG"], "description")
    if result.is_valid:
        result.data = sanitize_class_input(form)
    return result


def generate_next_class_id(existing_ids: Iterable[str]) -> str:
    numbers = [int(i[len(CLASS_ID_PREFIX):]) for i in existing_ids if CLASS_ID_PATTERN.match(i or "")]
    next_number = min((max(numbers) if numbers else 0) + 1, MAX_ID_NUMBER)
    return f"{CLASS_ID_PREFIX}{next_number:03d}"


def sanitize_class_input(form: Dict[str, Any]) -> Dict[str, Any]:
    """Trim text fields; blank optional fields become None."""
    out = dict(form)
    out["name"] = (form.get("name") or "").strip()
    for key in ("id", "grade", "description", "teacher", "subject"):
        if key in form:
            out[key] = (form.get(key) or "").strip() or None
    return out
