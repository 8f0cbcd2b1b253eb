from sqlalchemy import Column, Integer
from database.db import Base

class ThresholdSetting(Base):
    __tablename__ = "alert_thresholds"  # single-row table holding the active threshold set

    id = Column(Integer, primary_key=True)                           # always 1
    absences_30_day = Column(Integer, nullable=False, default=5)     # absences in the last 30 days
    absences_cumulative = Column(Integer, nullable=False, default=15)
    lateness_30_day = Column(Integer, nullable=False, default=8)     # late arrivals in the last 30 days
    lateness_cumulative = Column(Integer, nullable=False, default=20)
