"""
validators/thresholds.py

Alert threshold form validation.
- 30-day thresholds: whole numbers 1..30, cumulative thresholds: 1..100
- cumulative must be higher than the matching 30-day value
- values far from the defaults produce warnings, never errors
"""

import math
from typing import Any, Dict, Optional

from config.constants import (
    DEFAULT_THRESHOLDS,
    MAX_THRESHOLD_30_DAY,
    MAX_THRESHOLD_CUMULATIVE,
    MIN_THRESHOLD,
    THRESHOLD_MESSAGES,
)
from validators.common import ValidationResult

# field -> (label, max value, warning drift from default)
_FIELDS = {
    "absences_30_day": ("30-Day Absences", MAX_THRESHOLD_30_DAY, 5),
    "absences_cumulative": ("Cumulative Absences", MAX_THRESHOLD_CUMULATIVE, 10),
    "lateness_30_day": ("30-Day Lateness", MAX_THRESHOLD_30_DAY, 5),
    "lateness_cumulative": ("Cumulative Lateness", MAX_THRESHOLD_CUMULATIVE, 10),
}

_DRIFT_WARNINGS = {
    "absences_30_day": "30-day absence threshold differs significantly from recommended default",
    "absences_cumulative": "Cumulative absence threshold differs significantly from recommended default",
    "lateness_30_day": "30-day lateness threshold differs significantly from recommended default",
    "lateness_cumulative": "Cumulative lateness threshold differs significantly from recommended default",
}


def _to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def validate_threshold_value(value: Any, max_value: int) -> ValidationResult:
    result = ValidationResult()
    if value is None:
        result.add_error(THRESHOLD_MESSAGES["REQUIRED"])
        return result

    number = _to_number(value)
    if number is None or not math.isfinite(number):
        result.add_error(THRESHOLD_MESSAGES["INVALID_NUMBER"])
    elif number != int(number):
        result.add_error(THRESHOLD_MESSAGES["NOT_INTEGER"])
    elif number < MIN_THRESHOLD:
        result.add_error(THRESHOLD_MESSAGES["TOO_LOW"])
    elif number > max_value:
        result.add_error(
            THRESHOLD_MESSAGES["TOO_HIGH_30_DAY"] if max_value == MAX_THRESHOLD_30_DAY
            else THRESHOLD_MESSAGES["TOO_HIGH_CUMULATIVE"]
        )
    else:
        result.data = int(number)
    return result


def validate_threshold_form(form: Dict[str, Any]) -> ValidationResult:
    result = ValidationResult()
    parsed: Dict[str, int] = {}

    for field, (label, max_value, drift) in _FIELDS.items():
        value = (form or {}).get(field)
        if value is None:
            result.add_error(f"{THRESHOLD_MESSAGES['REQUIRED']}: {label}", None)
            result.field_errors.setdefault(field, []).append(THRESHOLD_MESSAGES["REQUIRED"])
            continue

        check = validate_threshold_value(value, max_value)
        if not check.is_valid:
            for message in check.errors:
                result.add_error(message, field)
            continue

        parsed[field] = check.data
        if abs(check.data - DEFAULT_THRESHOLDS[field]) > drift:
            result.warnings.append(_DRIFT_WARNINGS[field])

    # cumulative must exceed the rolling window it contains
    for kind in ("absence", "lateness"):
        prefix = "absences" if kind == "absence" else "lateness"
        rolling, cumulative = parsed.get(f"{prefix}_30_day"), parsed.get(f"{prefix}_cumulative")
        if rolling is not None and cumulative is not None and cumulative <= rolling:
            result.errors.append(f"Cumulative {kind} threshold should be higher than 30-day threshold")
            result.field_errors.setdefault(f"{prefix}_cumulative", []).append(
                "Should be higher than 30-day threshold"
            )
            result.is_valid = False

    if result.is_valid:
        result.data = parsed
    return result


def sanitize_threshold_input(form: Dict[str, Any]) -> Dict[str, int]:
    """Coerce each value to a positive whole number within bounds, falling back to the default."""
    out = {}
    for field in _FIELDS:
        value = (form or {}).get(field)
        number = _to_number(value)
        if number is not None and math.isfinite(number) and number == int(number) and number > 0:
            out[field] = min(max(int(number), MIN_THRESHOLD), MAX_THRESHOLD_CUMULATIVE)
        else:
            out[field] = DEFAULT_THRESHOLDS[field]
    return out


def validate_threshold_logic(thresholds: Dict[str, int]) -> ValidationResult:
    """Sanity rules on an already well-formed threshold set."""
    result = ValidationResult()
    if thresholds["absences_cumulative"] <= thresholds["absences_30_day"]:
        result.add_error("Cumulative absence threshold must be higher than 30-day threshold", "absences_cumulative")
    if thresholds["lateness_cumulative"] <= thresholds["lateness_30_day"]:
        result.add_error("Cumulative lateness threshold must be higher than 30-day threshold", "lateness_cumulative")
    if thresholds["absences_30_day"] < 2:
        result.add_error("30-day absence threshold seems too low (would generate excessive alerts)", "absences_30_day")
    if thresholds["lateness_30_day"] < 3:
        result.add_error("30-day lateness threshold seems too low (would generate excessive alerts)", "lateness_30_day")
    if thresholds["absences_30_day"] > 25:
        result.add_error("30-day absence threshold seems too high (alerts may never trigger)", "absences_30_day")
    if thresholds["lateness_30_day"] > 25:
        result.add_error("30-day lateness threshold seems too high (alerts may never trigger)", "lateness_30_day")
    if result.is_valid:
        result.data = thresholds
    return result
