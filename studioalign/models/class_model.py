# /studioalign/models/class_model.py

# --- Core Imports ---
import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict, model_validator

from ..services.class_helpers.scope import Scope

# --- Template Models ---

class ClassBase(BaseModel):
    name: str = Field(..., min_length=1)
    teacher_id: str
    location_id: Optional[str] = None
    start_time: datetime.time
    end_time: datetime.time
    is_recurring: bool = False
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6, description="0 is Sunday, 6 is Saturday.")
    date: Optional[datetime.date] = Field(default=None, description="Date of a one-off class.")
    start_date: Optional[datetime.date] = None
    end_date: Optional[datetime.date] = None


class ClassCreate(ClassBase):
    """
    Payload for creating a class. A recurring class needs `day_of_week`; a
    one-off class needs `date`. Both need an end time after the start time.
    """
    student_ids: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_schedule(self):
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time.")
        if self.is_recurring:
            if self.day_of_week is None:
                raise ValueError("A recurring class needs a day of the week.")
            if self.start_date and self.end_date and self.end_date < self.start_date:
                raise ValueError("End date cannot be before start date.")
        elif self.date is None:
            raise ValueError("A one-off class needs a date.")
        return self


class Class(ClassBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    studio_id: str
    teacher_id: Optional[str] = None


class ClassListItem(Class):
    """A class as listed for a role, with display names filled in."""
    teacher_name: Optional[str] = None
    location_name: Optional[str] = None
    student_count: int = 0
    enrolled_students: List[str] = Field(default_factory=list, description="Parent view: names of the parent's own children on the roster.")


# --- Scoped Edit & Delete Models ---

class ClassEdit(BaseModel):
    """
    Edit of the occurrence of a class on `target_date`. `scope` is required
    for recurring classes and ignored for one-off classes.

    Only the fields present in the payload change; an explicit null clears
    `location_id`. The schedule fields (`is_recurring`, `day_of_week`, `date`,
    `start_date`, `end_date`) can be changed on a one-off class or with scope
    `all`, and regenerate the class's instances.
    """
    target_date: datetime.date
    scope: Optional[Scope] = None
    name: Optional[str] = Field(default=None, min_length=1)
    teacher_id: Optional[str] = None
    location_id: Optional[str] = None
    start_time: Optional[datetime.time] = None
    end_time: Optional[datetime.time] = None
    is_recurring: Optional[bool] = None
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    date: Optional[datetime.date] = None
    start_date: Optional[datetime.date] = None
    end_date: Optional[datetime.date] = None
    student_ids: Optional[List[str]] = Field(default=None, description="When supplied, replaces the standing roster.")


class BulkInstanceUpdate(BaseModel):
    instance_ids: List[str] = Field(..., min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)
    teacher_id: Optional[str] = None
    location_id: Optional[str] = None
    start_time: Optional[datetime.time] = None
    end_time: Optional[datetime.time] = None


class ScopeResult(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    scope: Scope
    affected: int


class RosterUpdate(BaseModel):
    student_ids: List[str] = Field(default_factory=list)


# --- Calendar Models ---

class ClassInstance(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    class_id: str
    date: datetime.date
    name: str
    teacher_id: Optional[str] = None
    location_id: Optional[str] = None
    start_time: datetime.time
    end_time: datetime.time
    status: str


class CalendarOccurrence(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    class_id: str
    instance_id: Optional[str] = None
    date: datetime.date
    name: str
    start_time: datetime.time
    end_time: datetime.time
    is_recurring: bool
    teacher_id: Optional[str] = None
    location_id: Optional[str] = None
    enrolled_students: List[str] = Field(default_factory=list)


class CalendarDay(BaseModel):
    date: datetime.date
    day_name: str
    occurrences: List[CalendarOccurrence] = Field(default_factory=list)


class WeekCalendar(BaseModel):
    week_start: datetime.date
    days: List[CalendarDay]


class BulkUpdateResult(BaseModel):
    affected: int
