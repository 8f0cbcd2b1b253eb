from typing import List, Optional

from sqlalchemy.orm import Session

from config.constants import MAX_STUDENTS_PER_BULK_OPERATION
from models.students import Student as StudentModel
from repositories.student_repo import StudentRepository
from schemas.students import StudentCreate, StudentUpdate
from services.exceptions import BusinessRuleError, NotFoundError
from services.report_cache import report_cache
from validators.common import ValidationResult
from validators.students import generate_next_student_id, validate_student_form


def _raise_invalid(result: ValidationResult) -> None:
    raise BusinessRuleError(
        "Invalid student data",
        details=[{"field": f, "message": m} for f, msgs in result.field_errors.items() for m in msgs],
    )


class StudentService:
    def __init__(self, db: Session):
        self.db = db
        self.students = StudentRepository(db)

    def list(self, search: Optional[str] = None, grade: Optional[str] = None) -> List[StudentModel]:
        return self.students.list(search=search, grade=grade)

    def get(self, student_id: str) -> StudentModel:
        student = self.students.get(student_id)
        if student is None:
            raise NotFoundError(f"Student {student_id} not found")
        return student

    def validate(self, payload: StudentCreate) -> ValidationResult:
        return validate_student_form(payload.model_dump(), self.students.ids())

    def _build(self, payload: StudentCreate, existing_ids: List[str]) -> StudentModel:
        result = validate_student_form(payload.model_dump(), existing_ids)
        if not result.is_valid:
            _raise_invalid(result)
        data = result.data
        data["id"] = data["id"] or generate_next_student_id(existing_ids)
        return StudentModel(**data)

    def create(self, payload: StudentCreate) -> StudentModel:
        student = self.students.add(self._build(payload, self.students.ids()))
        self.db.commit()
        report_cache.clear()
        self.db.refresh(student)
        return student

    def bulk_create(self, payloads: List[StudentCreate]) -> List[StudentModel]:
        """All-or-nothing: one invalid entry rejects the whole batch."""
        if len(payloads) > MAX_STUDENTS_PER_BULK_OPERATION:
            raise BusinessRuleError(
                f"Cannot create more than {MAX_STUDENTS_PER_BULK_OPERATION} students at once"
            )
        existing_ids = self.students.ids()
        created = []
        for payload in payloads:
            student = self._build(payload, existing_ids)
            existing_ids.append(student.id)
            created.append(self.students.add(student))
        self.db.commit()
        report_cache.clear()
        return created

    def update(self, student_id: str, payload: StudentUpdate) -> StudentModel:
        student = self.get(student_id)
        merged = {
            "first_name": student.first_name,
            "last_name": student.last_name,
            "grade": student.grade,
            **payload.model_dump(exclude_unset=True),
        }
        result = validate_student_form(merged, check_id=False)
        if not result.is_valid:
            _raise_invalid(result)
        for key in ("first_name", "last_name", "grade"):
            setattr(student, key, result.data[key])
        self.db.commit()
        report_cache.clear()
        self.db.refresh(student)
        return student

    def delete(self, student_id: str) -> None:
        # attendance rows are kept; they reference students by id only
        self.students.delete(self.get(student_id))
        self.db.commit()
        report_cache.clear()
