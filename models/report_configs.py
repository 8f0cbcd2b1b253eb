from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, String
from database.db import Base

class SavedReportConfig(Base):
    __tablename__ = "saved_report_configs"  # named report requests that can be re-run

    id = Column(String(40), primary_key=True)                        # config_<12 hex chars>
    name = Column(String(100), nullable=False)
    request = Column(JSON, nullable=False)                           # ReportRequest.model_dump(mode="json")
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
