from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


# ✅ create request body - id is generated (CLS###) when omitted
class ClassCreate(BaseModel):
    id: Optional[str] = None
    name: str
    grade: Optional[str] = None
    description: Optional[str] = None
    teacher: Optional[str] = None
    subject: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=0)
    status: Literal["active", "inactive", "archived", "draft"] = "active"


class ClassUpdate(BaseModel):
    name: Optional[str] = None
    grade: Optional[str] = None
    description: Optional[str] = None
    teacher: Optional[str] = None
    subject: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=0)
    status: Optional[Literal["active", "inactive", "archived", "draft"]] = None


# ✅ response schema, enrollment figures are derived from class_students
class Class(BaseModel):
    id: str
    name: str
    grade: Optional[str] = None
    description: Optional[str] = None
    teacher: Optional[str] = None
    subject: Optional[str] = None
    capacity: Optional[int] = None
    status: str
    display_name: str
    grade_display: str
    student_count: int = 0
    enrollment_percentage: int = 0
    enrollment_status: Literal["available", "full", "overbooked", "unknown"] = "unknown"

    model_config = ConfigDict(from_attributes=True)


class ClassAssignRequest(BaseModel):
    student_ids: List[str] = Field(..., min_length=1)
