from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database.db import get_db
from schemas.schedule import BulkExcuseRequest, DayOff, DayOffCreate
from services.schedule_service import ScheduleService

router = APIRouter(prefix="/schedule", tags=["schedule"])


# ✅ [READ] planned days off in a range
@router.get("/days-off")
def list_days_off(
    start: Optional[date] = Query(None, description="YYYY-MM-DD"),
    end: Optional[date] = Query(None, description="YYYY-MM-DD"),
    db: Session = Depends(get_db),
):
    days = ScheduleService(db).list_days_off(start, end)
    return {"success": True, "data": [DayOff.model_validate(d).model_dump(mode="json") for d in days]}


# ✅ [CREATE] plan a day off (409 if already planned, 400 if in the past)
@router.post("/days-off", status_code=201)
def plan_day_off(payload: DayOffCreate, db: Session = Depends(get_db)):
    day_off = ScheduleService(db).plan_day_off(payload.date, payload.reason)
    return {
        "success": True,
        "data": DayOff.model_validate(day_off).model_dump(mode="json"),
        "message": "Day off scheduled",
    }


# ✅ [DELETE]
@router.delete("/days-off/{day}")
def remove_day_off(day: date, db: Session = Depends(get_db)):
    ScheduleService(db).remove_day_off(day)
    return {"success": True, "message": "Day off removed"}


# ✅ [CHECK] weekend / planned day off
@router.get("/off-day/{day}")
def check_off_day(day: date, db: Session = Depends(get_db)):
    service = ScheduleService(db)
    return {
        "success": True,
        "data": {
            "date": day.isoformat(),
            "is_planned_day_off": service.is_planned_day_off(day),
            "is_off_day": service.is_off_day(day),
        },
    }


# ✅ [BULK] excused record for every student without one that day
@router.post("/bulk-excuse")
def bulk_excuse(payload: BulkExcuseRequest, db: Session = Depends(get_db)):
    processed = ScheduleService(db).apply_day_off_to_all_students(payload.date)
    return {
        "success": True,
        "data": {"processed_count": processed, "date": payload.date.isoformat()},
        "message": f"Successfully applied {processed} excused absences",
    }
