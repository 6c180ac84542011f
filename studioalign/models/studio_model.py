# /studioalign/models/studio_model.py

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict


class Studio(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class StudioUpdate(BaseModel):
    """All fields optional; only the supplied ones are written."""
    name: Optional[str] = Field(default=None, min_length=1)
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class LocationCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    address: Optional[str] = None


class Location(LocationCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    studio_id: str


class Teacher(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str


class StudentCreate(BaseModel):
    name: str = Field(..., min_length=1)
    date_of_birth: Optional[date] = None


class Student(StudentCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    parent_id: Optional[str] = None


class StudentWithParent(Student):
    """Row of the owner's student list."""
    parent_name: Optional[str] = None
    parent_email: Optional[str] = None
