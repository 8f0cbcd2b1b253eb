from typing import List, Optional

from sqlalchemy.orm import Session

from models.report_configs import SavedReportConfig as ReportConfigModel


class ReportConfigRepository:
    def __init__(self, db: Session):
        self.db = db

    def list(self) -> List[ReportConfigModel]:
        return self.db.query(ReportConfigModel).order_by(ReportConfigModel.created_at.desc()).all()

    def get(self, config_id: str) -> Optional[ReportConfigModel]:
        return self.db.query(ReportConfigModel).filter(ReportConfigModel.id == config_id).first()

    def add(self, config: ReportConfigModel) -> ReportConfigModel:
        self.db.add(config)
        self.db.commit()
        self.db.refresh(config)
        return config

    def delete(self, config: ReportConfigModel) -> None:
        self.db.delete(config)
        self.db.commit()
