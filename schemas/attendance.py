from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

# ✅ read / response schema
class AttendanceRecord(BaseModel):
    id: Optional[int] = None
    student_id: str
    date: date
    status: Literal["PRESENT", "LATE", "ABSENT", "EXCUSED"]
    late: bool = False
    early_dismissal: bool = False
    excused: bool = False

    model_config = ConfigDict(from_attributes=True)


# ✅ one entry in a batch submission
class BatchStudentEntry(BaseModel):
    id: str = Field(..., min_length=1, description="Student ID is required")
    status: Literal["PRESENT", "LATE", "ABSENT", "EXCUSED"]
    late: bool = False
    early_dismissal: bool = Field(False, alias="earlyDismissal")

    model_config = ConfigDict(populate_by_name=True)


# ✅ POST /attendance/batch body
class BatchAttendanceRequest(BaseModel):
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="YYYY-MM-DD")
    students: List[BatchStudentEntry] = Field(..., min_length=1)
    override: bool = Field(False, description="Overwrite records that already exist for this date")


class ExistingRecordFlags(BaseModel):
    late: bool
    early_dismissal: bool
    excused: bool


class DuplicateEntry(BaseModel):
    student_id: str
    existing_status: str
    existing_record: ExistingRecordFlags
    incoming_status: str
    incoming_record: ExistingRecordFlags


class BatchResultEntry(BaseModel):
    student_id: str
    status: Literal["success", "error"]
    message: Optional[str] = None
    error: Optional[str] = None


class BatchSummary(BaseModel):
    total: int
    successful: int
    failed: int
