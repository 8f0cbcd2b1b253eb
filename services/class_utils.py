from typing import Iterable, Optional


def get_enrollment_percentage(count: int, capacity: Optional[int]) -> int:
    """0 without a capacity; otherwise round(count / capacity * 100), above 100 when overbooked."""
    if not capacity or capacity <= 0:
        return 0
    return round(count / capacity * 100)


def get_class_enrollment_status(count: int, capacity: Optional[int]) -> str:
    if not capacity or capacity <= 0:
        return "unknown"
    if count < capacity:
        return "available"
    if count == capacity:
        return "full"
    return "overbooked"


def count_students_in_class(class_id: str, memberships: Iterable) -> int:
    """Counts enrolled membership rows (ORM objects or dicts) for one class."""
    if not class_id:
        return 0
    total = 0
    for m in memberships:
        row = m if isinstance(m, dict) else {"class_id": m.class_id, "status": m.status}
        if row.get("class_id") == class_id and row.get("status") == "enrolled":
            total += 1
    return total


def _ordinal_suffix(num: int) -> str:
    if num % 10 == 1 and num % 100 != 11:
        return "st"
    if num % 10 == 2 and num % 100 != 12:
        return "nd"
    if num % 10 == 3 and num % 100 != 13:
        return "rd"
    return "th"


def get_class_grade_display(grade: Optional[str]) -> str:
    if grade is None or str(grade).strip() == "":
        return "All Grades"

    value = str(grade).strip().upper()
    if value in ("K", "KINDERGARTEN"):
        return "Kindergarten"
    if value in ("PK", "PRE-K", "PREKINDERGARTEN"):
        return "Pre-K"
    if value.isdigit() and 1 <= int(value) <= 12:
        num = int(value)
        return f"{num}{_ordinal_suffix(num)} Grade"
    return value[:1] + value[1:].lower()


def format_class_name(name: Optional[str], grade: Optional[str] = None) -> str:
    if not name:
        return "Unnamed Class"
    clean = name.strip()
    if not grade:
        return clean
    clean_grade = grade.strip()
    # grade already part of the name (e.g. "Grade 5 Math" / "5")
    if clean_grade.lower() in clean.lower():
        return clean
    return f"{clean} - {get_class_grade_display(clean_grade)}"
