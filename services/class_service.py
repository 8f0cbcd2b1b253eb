from typing import List, Optional

from sqlalchemy.orm import Session

from models.classes import SchoolClass as ClassModel
from repositories.class_repo import ClassRepository
from repositories.student_repo import StudentRepository
from schemas.classes import Class as ClassSchema
from schemas.classes import ClassCreate, ClassUpdate
from services.class_utils import (
    format_class_name,
    get_class_enrollment_status,
    get_class_grade_display,
    get_enrollment_percentage,
)
from services.exceptions import BusinessRuleError, NotFoundError
from validators.classes import generate_next_class_id, validate_class_form


def to_class_schema(school_class: ClassModel, student_count: int) -> ClassSchema:
    return ClassSchema(
        id=school_class.id,
        name=school_class.name,
        grade=school_class.grade,
        description=school_class.description,
        teacher=school_class.teacher,
        subject=school_class.subject,
        capacity=school_class.capacity,
        status=school_class.status,
        display_name=format_class_name(school_class.name, school_class.grade),
        grade_display=get_class_grade_display(school_class.grade),
        student_count=student_count,
        enrollment_percentage=get_enrollment_percentage(student_count, school_class.capacity),
        enrollment_status=get_class_enrollment_status(student_count, school_class.capacity),
    )


class ClassService:
    def __init__(self, db: Session):
        self.db = db
        self.classes = ClassRepository(db)
        self.students = StudentRepository(db)

    def _get(self, class_id: str) -> ClassModel:
        school_class = self.classes.get(class_id)
        if school_class is None:
            raise NotFoundError(f"Class {class_id} not found")
        return school_class

    def list(self, status: Optional[str] = None) -> List[ClassSchema]:
        counts = self.classes.enrollment_counts()
        return [to_class_schema(c, counts.get(c.id, 0)) for c in self.classes.list(status)]

    def get(self, class_id: str) -> ClassSchema:
        school_class = self._get(class_id)
        return to_class_schema(school_class, self.classes.enrollment_counts().get(class_id, 0))

    def create(self, payload: ClassCreate) -> ClassSchema:
        existing_ids = self.classes.ids()
        result = validate_class_form(payload.model_dump(), existing_ids)
        if not result.is_valid:
            raise BusinessRuleError(
                "Invalid class data",
                details=[{"field": f, "message": m} for f, msgs in result.field_errors.items() for m in msgs],
            )
        data = result.data
        data["id"] = data.get("id") or generate_next_class_id(existing_ids)
        school_class = self.classes.add(ClassModel(**data))
        self.db.commit()
        self.db.refresh(school_class)
        return to_class_schema(school_class, 0)

    def update(self, class_id: str, payload: ClassUpdate) -> ClassSchema:
        school_class = self._get(class_id)
        changes = payload.model_dump(exclude_unset=True)
        merged = {
            "name": school_class.name,
            "grade": school_class.grade,
            "description": school_class.description,
            **changes,
        }
        result = validate_class_form(merged)
        if not result.is_valid:
            raise BusinessRuleError(
                "Invalid class data",
                details=[{"field": f, "message": m} for f, msgs in result.field_errors.items() for m in msgs],
            )
        for key in changes:
            setattr(school_class, key, result.data.get(key, changes[key]))
        self.db.commit()
        return self.get(class_id)

    def delete(self, class_id: str) -> None:
        self.classes.delete(self._get(class_id))
        self.db.commit()

    # ==========================================================
    # [membership]
    # ==========================================================
    def members(self, class_id: str):
        self._get(class_id)
        ids = [m.student_id for m in self.classes.memberships(class_id) if m.status == "enrolled"]
        return self.students.get_many(ids)

    def assign_students(self, class_id: str, student_ids: List[str]) -> dict:
        self._get(class_id)
        known = {s.id for s in self.students.get_many(student_ids)}
        added, skipped, missing = [], [], []
        for sid in dict.fromkeys(student_ids):
            if sid not in known:
                missing.append(sid)
            elif self.classes.membership(class_id, sid) is not None:
                skipped.append(sid)
            else:
                self.classes.add_membership(class_id, sid)
                added.append(sid)
        self.db.commit()
        return {"added": added, "already_enrolled": skipped, "not_found": missing}

    def remove_student(self, class_id: str, student_id: str) -> None:
        self._get(class_id)
        row = self.classes.membership(class_id, student_id)
        if row is None:
            raise NotFoundError(f"Student {student_id} is not assigned to class {class_id}")
        self.classes.remove_membership(row)
        self.db.commit()
