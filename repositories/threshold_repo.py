from sqlalchemy.orm import Session

from config.constants import DEFAULT_THRESHOLDS
from models.thresholds import ThresholdSetting as ThresholdModel


class ThresholdRepository:
    """Single-row store; the row is created with defaults on first read."""

    def __init__(self, db: Session):
        self.db = db

    def get(self) -> ThresholdModel:
        row = self.db.query(ThresholdModel).order_by(ThresholdModel.id).first()
        if row is None:
            row = ThresholdModel(**DEFAULT_THRESHOLDS)
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        return row

    def save(self, values: dict) -> ThresholdModel:
        row = self.get()
        for key, value in values.items():
            setattr(row, key, value)
        self.db.commit()
        self.db.refresh(row)
        return row
