from datetime import date
from pydantic import BaseModel, ConfigDict

from schemas.enums import DayOffReason


class DayOffCreate(BaseModel):
    date: date
    reason: DayOffReason


class DayOff(BaseModel):
    date: date
    reason: DayOffReason
    scope: str = "ALL_STUDENTS"

    model_config = ConfigDict(from_attributes=True)


class BulkExcuseRequest(BaseModel):
    date: date
