from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database.db import get_db
from schemas.attendance import AttendanceRecord as AttendanceSchema
from schemas.attendance import BatchAttendanceRequest
from services.attendance_service import AttendanceService

router = APIRouter(prefix="/attendance", tags=["attendance"])


# ==========================================================
# [1] batch submission
# ==========================================================

# ✅ [CREATE] record attendance for several students on one date
@router.post("/batch")
def submit_batch(payload: BatchAttendanceRequest, db: Session = Depends(get_db)):
    outcome = AttendanceService(db).submit_batch(payload)
    return {
        "success": True,
        "date": outcome["date"],
        "summary": outcome["summary"].model_dump(),
        "results": [r.model_dump(exclude_none=True) for r in outcome["results"]],
        "message": outcome["message"],
    }


# ✅ [CHECK] report which students already have a record, without writing
@router.post("/check-duplicates")
def check_duplicates(payload: BatchAttendanceRequest, db: Session = Depends(get_db)):
    duplicates = AttendanceService(db).find_duplicates(payload)
    return {
        "success": True,
        "data": {
            "has_duplicates": bool(duplicates),
            "duplicates": [d.model_dump() for d in duplicates],
        },
    }


# ==========================================================
# [2] read
# ==========================================================

# ✅ [READ] attendance records, optionally for one student and/or date
@router.get("/")
def list_attendance(
    student_id: Optional[str] = Query(None, description="e.g. STU001"),
    date: Optional[date] = Query(None, description="YYYY-MM-DD"),
    db: Session = Depends(get_db),
):
    records = AttendanceService(db).list_records(student_id=student_id, on_date=date)
    return {
        "success": True,
        "data": [AttendanceSchema.model_validate(r).model_dump(mode="json") for r in records],
    }
