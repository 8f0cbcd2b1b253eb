from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from database.db import Base


def _utcnow():
    return datetime.now(timezone.utc)


class SchoolClass(Base):
    __tablename__ = "classes"

    id = Column(String(10), primary_key=True, index=True)   # class ID (e.g. CLS001)
    name = Column(String(100), nullable=False)              # class name
    grade = Column(String(15))                              # grade level (optional)
    description = Column(String(500))
    teacher = Column(String(100))                           # homeroom / subject teacher name
    subject = Column(String(100))
    capacity = Column(Integer)                              # seats (optional, no clamping on enrollment)
    status = Column(String(10), nullable=False, default="active")  # active | inactive | archived | draft

    # ==========================================================
    # [relationships]
    # ==========================================================

    # ✅ class <-> student membership rows (1:N join records)
    memberships = relationship(
        "ClassStudent",
        back_populates="school_class",
        cascade="all, delete-orphan",
    )


class ClassStudent(Base):
    __tablename__ = "class_students"  # many-to-many join between classes and students
    __table_args__ = (
        UniqueConstraint("class_id", "student_id", name="uq_class_student"),
    )

    id = Column(Integer, primary_key=True, index=True)
    class_id = Column(String(10), ForeignKey("classes.id"), nullable=False, index=True)
    student_id = Column(String(10), nullable=False, index=True)     # weak reference to students.id
    enrolled_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    status = Column(String(10), nullable=False, default="enrolled")  # enrolled | pending | dropped | completed

    school_class = relationship("SchoolClass", back_populates="memberships")
