from sqlalchemy import Boolean, Column, Date, Integer, String, UniqueConstraint
from database.db import Base

class AttendanceRecord(Base):
    __tablename__ = "attendance_records"  # one row per student per school day
    __table_args__ = (
        UniqueConstraint("student_id", "date", name="uq_attendance_student_date"),
    )

    id = Column(Integer, primary_key=True, index=True)              # surrogate PK
    student_id = Column(String(10), nullable=False, index=True)     # students.id (weak reference, no FK cascade)
    date = Column(Date, nullable=False, index=True)                 # calendar date, no time component
    status = Column(String(10), nullable=False)                     # PRESENT | LATE | ABSENT | EXCUSED
    late = Column(Boolean, nullable=False, default=False)           # arrived late (modifier)
    early_dismissal = Column(Boolean, nullable=False, default=False)  # left early (modifier)
    excused = Column(Boolean, nullable=False, default=False)        # mirrors status == EXCUSED
