from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from models.schedule import ScheduledDayOff as DayOffModel


class ScheduleRepository:
    def __init__(self, db: Session):
        self.db = db

    def list(self, start: Optional[date] = None, end: Optional[date] = None) -> List[DayOffModel]:
        q = self.db.query(DayOffModel)
        if start:
            q = q.filter(DayOffModel.date >= start)
        if end:
            q = q.filter(DayOffModel.date <= end)
        return q.order_by(DayOffModel.date).all()

    def get(self, on_date: date) -> Optional[DayOffModel]:
        return self.db.query(DayOffModel).filter(DayOffModel.date == on_date).first()

    def add(self, day_off: DayOffModel) -> DayOffModel:
        self.db.add(day_off)
        return day_off

    def delete(self, day_off: DayOffModel) -> None:
        self.db.delete(day_off)
