from sqlalchemy import Column, Date, String
from database.db import Base

class ScheduledDayOff(Base):
    __tablename__ = "scheduled_days_off"  # planned school-wide days off

    date = Column(Date, primary_key=True)                                # one entry per calendar date
    reason = Column(String(20), nullable=False)                          # HOLIDAY | PROF_DEV | REPORT_CARD | OTHER
    scope = Column(String(20), nullable=False, default="ALL_STUDENTS")   # currently always ALL_STUDENTS
