# /studioalign/models/attendance_model.py

import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    LATE = "late"
    AUTHORISED = "authorised"
    UNAUTHORISED = "unauthorised"


class AttendanceRow(BaseModel):
    """One enrolled student on an attendance sheet. `attendance` is None until marked."""
    instance_enrollment_id: str
    student_id: str
    student_name: str
    attendance: Optional[AttendanceStatus] = None
    notes: Optional[str] = None


class AttendanceSheet(BaseModel):
    instance_id: str
    class_id: str
    class_name: str
    date: datetime.date
    rows: List[AttendanceRow] = Field(default_factory=list)


class AttendanceRecordIn(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    instance_enrollment_id: str
    status: AttendanceStatus
    notes: Optional[str] = None


class AttendanceSave(BaseModel):
    records: List[AttendanceRecordIn] = Field(..., min_length=1)


class AttendanceSaveResult(BaseModel):
    saved: int
