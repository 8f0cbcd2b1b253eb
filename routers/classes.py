from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from schemas.classes import ClassAssignRequest, ClassCreate, ClassUpdate
from schemas.students import Student as StudentSchema
from services.class_service import ClassService

router = APIRouter(prefix="/classes", tags=["classes"])


# ✅ [READ] all classes with enrollment figures
@router.get("/")
def list_classes(status: Optional[str] = None, db: Session = Depends(get_db)):
    return {"success": True, "data": [c.model_dump() for c in ClassService(db).list(status)]}


# ✅ [CREATE]
@router.post("/", status_code=201)
def create_class(payload: ClassCreate, db: Session = Depends(get_db)):
    created = ClassService(db).create(payload)
    return {"success": True, "data": created.model_dump(), "message": "Class created successfully"}


# ✅ [READ] one class
@router.get("/{class_id}")
def read_class(class_id: str, db: Session = Depends(get_db)):
    return {"success": True, "data": ClassService(db).get(class_id).model_dump()}


# ✅ [UPDATE]
@router.put("/{class_id}")
def update_class(class_id: str, payload: ClassUpdate, db: Session = Depends(get_db)):
    updated = ClassService(db).update(class_id, payload)
    return {"success": True, "data": updated.model_dump(), "message": "Class updated successfully"}


# ✅ [DELETE] membership rows go with the class
@router.delete("/{class_id}")
def delete_class(class_id: str, db: Session = Depends(get_db)):
    ClassService(db).delete(class_id)
    return {"success": True, "message": "Class deleted successfully"}


# ==========================================================
# [membership]
# ==========================================================

# ✅ [READ] enrolled students
@router.get("/{class_id}/students")
def list_class_students(class_id: str, db: Session = Depends(get_db)):
    students = ClassService(db).members(class_id)
    return {"success": True, "data": [StudentSchema.model_validate(s).model_dump() for s in students]}


# ✅ [CREATE] assign students (already-enrolled and unknown ids are reported, not fatal)
@router.post("/{class_id}/students")
def assign_class_students(class_id: str, payload: ClassAssignRequest, db: Session = Depends(get_db)):
    outcome = ClassService(db).assign_students(class_id, payload.student_ids)
    return {"success": True, "data": outcome, "message": f"{len(outcome['added'])} students assigned"}


# ✅ [DELETE] remove one student from a class
@router.delete("/{class_id}/students/{student_id}")
def remove_class_student(class_id: str, student_id: str, db: Session = Depends(get_db)):
    ClassService(db).remove_student(class_id, student_id)
    return {"success": True, "message": "Student removed from class"}
