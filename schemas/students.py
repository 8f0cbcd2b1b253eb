from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

# ✅ input (POST)
class StudentCreate(BaseModel):
    id: Optional[str] = None                     # generated (STU###) when omitted
    first_name: str = Field(..., max_length=50)
    last_name: str = Field(..., max_length=50)
    grade: Optional[str] = None

# ✅ partial update (PUT)
class StudentUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, max_length=50)
    last_name: Optional[str] = Field(default=None, max_length=50)
    grade: Optional[str] = None

# ✅ output
class Student(BaseModel):
    id: str
    first_name: str
    last_name: str
    grade: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

# ✅ bulk create
class StudentBulkCreate(BaseModel):
    students: List[StudentCreate] = Field(..., min_length=1)
