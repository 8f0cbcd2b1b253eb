from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database.db import get_db
from schemas.students import Student as StudentSchema
from schemas.students import StudentBulkCreate, StudentCreate, StudentUpdate
from services.alert_service import AlertService
from services.student_service import StudentService

router = APIRouter(prefix="/students", tags=["students"])


def _out(student):
    return StudentSchema.model_validate(student).model_dump()


# ==========================================================
# [1] CRUD
# ==========================================================

# ✅ [READ] list / search
@router.get("/")
def list_students(
    search: Optional[str] = Query(None, description="matches first name, last name or id"),
    grade: Optional[str] = None,
    db: Session = Depends(get_db),
):
    students = StudentService(db).list(search=search, grade=grade)
    return {"success": True, "data": [_out(s) for s in students], "total": len(students)}


# ✅ [VALIDATE] dry-run the create form
@router.post("/validate")
def validate_student(payload: StudentCreate, db: Session = Depends(get_db)):
    result = StudentService(db).validate(payload)
    return {"success": True, "data": result.model_dump(exclude={"data"})}


# ✅ [CREATE] id is generated when omitted
@router.post("/", status_code=201)
def create_student(payload: StudentCreate, db: Session = Depends(get_db)):
    student = StudentService(db).create(payload)
    return {"success": True, "data": _out(student), "message": "Student created successfully"}


# ✅ [CREATE] several at once (all or nothing)
@router.post("/bulk", status_code=201)
def bulk_create_students(payload: StudentBulkCreate, db: Session = Depends(get_db)):
    created = StudentService(db).bulk_create(payload.students)
    return {"success": True, "data": [_out(s) for s in created], "message": f"{len(created)} students created"}


# ✅ [READ] one student
@router.get("/{student_id}")
def read_student(student_id: str, db: Session = Depends(get_db)):
    return {"success": True, "data": _out(StudentService(db).get(student_id))}


# ✅ [UPDATE]
@router.put("/{student_id}")
def update_student(student_id: str, payload: StudentUpdate, db: Session = Depends(get_db)):
    student = StudentService(db).update(student_id, payload)
    return {"success": True, "data": _out(student), "message": "Student updated successfully"}


# ✅ [DELETE]
@router.delete("/{student_id}")
def delete_student(student_id: str, db: Session = Depends(get_db)):
    StudentService(db).delete(student_id)
    return {"success": True, "message": "Student deleted successfully"}


# ==========================================================
# [2] per-student alerts
# ==========================================================

# ✅ [READ] threshold evaluation for one student
@router.get("/{student_id}/alerts")
def read_student_alerts(student_id: str, db: Session = Depends(get_db)):
    return {"success": True, "data": AlertService(db).evaluate_student(student_id).model_dump(mode="json")}
