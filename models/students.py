from sqlalchemy import Column, String
from database.db import Base

class Student(Base):
    __tablename__ = "students"  # student master table

    id = Column(String(10), primary_key=True, index=True)           # student ID (e.g. STU001)
    first_name = Column(String(50), nullable=False)                 # first name
    last_name = Column(String(50), nullable=False, index=True)      # last name (used by last-name filters)
    grade = Column(String(15))                                      # grade level (optional, e.g. K, 5, Senior)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
