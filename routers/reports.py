from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from database.db import get_db
from schemas.reports import ReportFilter, ReportRequest, SavedReport, SavedReportCreate
from services.exceptions import BusinessRuleError
from services.report_service import ReportService
from validators.report_filters import sanitize_filter_input, validate_report_filters

router = APIRouter(prefix="/reports", tags=["reports"])


def _checked_filters(filters: ReportFilter) -> ReportFilter:
    """Business-rule validation on top of the schema; warnings never block."""
    result = validate_report_filters(filters.model_dump(mode="json", exclude_none=True))
    if not result.is_valid:
        raise BusinessRuleError(
            "Invalid report filters",
            details=[{"field": f, "message": m} for f, msgs in result.field_errors.items() for m in msgs],
        )
    return filters


# ==========================================================
# [1] generate
# ==========================================================

# ✅ [REPORT] filtered records + statistics + insights
@router.post("/")
def generate_report(payload: ReportRequest, db: Session = Depends(get_db)):
    _checked_filters(payload.filters)
    result = ReportService(db).run_request(payload)
    return {"success": True, "data": result.model_dump(mode="json")}


# ✅ [SUMMARY] quick summary for a relative period
@router.get("/summary")
def report_summary(
    period: Optional[str] = Query(None, pattern="^(today|7days|30days|90days)$"),
    db: Session = Depends(get_db),
):
    filters = ReportFilter(relative_period=period) if period else ReportFilter()
    result = ReportService(db).generate_report(filters)
    return {
        "success": True,
        "data": {
            "summary": result.summary.model_dump(mode="json"),
            "insights": result.insights.model_dump(mode="json"),
            "metrics": result.metrics.model_dump(mode="json"),
        },
    }


# ✅ [VALIDATE] raw filter input -> errors / warnings (never writes, never raises on bad input)
@router.post("/validate-filters")
def validate_filters(raw: Dict[str, Any] = Body(default_factory=dict)):
    result = validate_report_filters(sanitize_filter_input(raw))
    return {"success": True, "data": result.model_dump(mode="json", exclude={"data"})}


# ✅ [EXPORT] CSV of every filtered record
@router.post("/export")
def export_report(payload: ReportRequest, db: Session = Depends(get_db)):
    _checked_filters(payload.filters)
    content = ReportService(db).export_csv(payload.filters, payload.sorting)
    filename = f"attendance-report-{date.today().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ==========================================================
# [2] saved configurations
# ==========================================================

# ✅ [READ]
@router.get("/configs")
def list_configs(db: Session = Depends(get_db)):
    configs = ReportService(db).list_configs()
    return {"success": True, "data": [SavedReport.model_validate(c).model_dump(mode="json") for c in configs]}


# ✅ [CREATE]
@router.post("/configs", status_code=201)
def save_config(payload: SavedReportCreate, db: Session = Depends(get_db)):
    _checked_filters(payload.request.filters)
    config = ReportService(db).save_config(payload.name, payload.request)
    return {
        "success": True,
        "data": SavedReport.model_validate(config).model_dump(mode="json"),
        "message": "Report configuration saved",
    }


# ✅ [RUN] re-run a saved request
@router.post("/configs/{config_id}/run")
def run_config(config_id: str, db: Session = Depends(get_db)):
    result = ReportService(db).run_config(config_id)
    return {"success": True, "data": result.model_dump(mode="json")}


# ✅ [DELETE]
@router.delete("/configs/{config_id}")
def delete_config(config_id: str, db: Session = Depends(get_db)):
    ReportService(db).delete_config(config_id)
    return {"success": True, "message": "Report configuration deleted"}
