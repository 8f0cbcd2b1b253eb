from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from database.db import get_db
from services.alert_service import AlertService
from validators.thresholds import validate_threshold_form

router = APIRouter(prefix="/alerts", tags=["alerts"])


# ✅ [READ] every student's counters, triggered alerts and "approaching" flags
@router.get("/")
def list_alerts(
    only_triggered: bool = Query(False, description="skip students with no triggered alert"),
    db: Session = Depends(get_db),
):
    summaries = AlertService(db).evaluate_all(only_triggered=only_triggered)
    return {
        "success": True,
        "data": [s.model_dump(mode="json") for s in summaries],
        "total_triggered": sum(1 for s in summaries if s.result.triggered_alerts),
    }


# ✅ [READ] active thresholds
@router.get("/thresholds")
def read_thresholds(db: Session = Depends(get_db)):
    return {"success": True, "data": AlertService(db).get_thresholds().model_dump()}


# ✅ [UPDATE] thresholds (raw form values: validator handles strings, floats, missing keys)
@router.put("/thresholds")
def update_thresholds(form: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    saved = AlertService(db).update_thresholds(form)
    warnings = validate_threshold_form(form).warnings
    return {"success": True, "data": saved.model_dump(), "warnings": warnings, "message": "Thresholds updated"}


# ✅ [VALIDATE] dry-run the threshold form
@router.post("/thresholds/validate")
def validate_thresholds(form: Dict[str, Any] = Body(...)):
    result = validate_threshold_form(form)
    return {"success": True, "data": result.model_dump(mode="json")}


# ✅ [READ] one student
@router.get("/students/{student_id}")
def read_student_alert(student_id: str, db: Session = Depends(get_db)):
    return {"success": True, "data": AlertService(db).evaluate_student(student_id).model_dump(mode="json")}


# ✅ [READ] recent attendance trend, (present + late) / total
@router.get("/students/{student_id}/trend")
def read_student_trend(student_id: str, days: int = Query(14, ge=1, le=365), db: Session = Depends(get_db)):
    return {"success": True, "data": AlertService(db).student_trend(student_id, days).model_dump()}
