# /studioalign/db/models/class_models.py

"""
SQLAlchemy models for the schedule: class templates, their dated instances,
the standing roster, per-instance enrollments and attendance.

A `Class` is a template. Recurring templates carry `day_of_week` (0=Sunday)
and a [start_date, end_date] range; one-off templates carry a single `date`.
Each concrete occurrence is a `ClassInstance` row keyed by (class_id, date).
Instance columns hold the effective values for that occurrence, so an edit
with a narrower scope simply writes different values into fewer rows.
"""

from sqlalchemy import (
    Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Time, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..base_class import Base, generate_id


class Class(Base):
    __tablename__ = "classes"

    id = Column(String, primary_key=True, index=True, default=lambda: generate_id("cls"))
    studio_id = Column(String, ForeignKey("studios.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, index=True, nullable=False)
    teacher_id = Column(String, ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True, index=True)
    location_id = Column(String, ForeignKey("locations.id", ondelete="SET NULL"), nullable=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_recurring = Column(Boolean, nullable=False, default=True)
    day_of_week = Column(Integer, nullable=True)
    date = Column(Date, nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    # Last date for which instance rows have been generated.
    materialized_through = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    teacher = relationship("Teacher")
    location = relationship("Location")
    instances = relationship(
        "ClassInstance", back_populates="class_", cascade="all, delete-orphan",
        order_by="ClassInstance.date",
    )
    roster = relationship("ClassStudent", back_populates="class_", cascade="all, delete-orphan")
    channels = relationship("ClassChannel", back_populates="class_", cascade="all, delete-orphan")


class ClassInstance(Base):
    __tablename__ = "class_instances"
    __table_args__ = (UniqueConstraint("class_id", "date", name="uix_class_instance_date"),)

    id = Column(String, primary_key=True, index=True, default=lambda: generate_id("ins"))
    class_id = Column(String, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    name = Column(String, nullable=False)
    teacher_id = Column(String, ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True)
    location_id = Column(String, ForeignKey("locations.id", ondelete="SET NULL"), nullable=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    status = Column(String, nullable=False, default="scheduled")

    class_ = relationship("Class", back_populates="instances")
    teacher = relationship("Teacher")
    location = relationship("Location")
    enrollments = relationship("InstanceEnrollment", back_populates="instance", cascade="all, delete-orphan")


class ClassStudent(Base):
    """The standing roster of a class template."""
    __tablename__ = "class_students"

    class_id = Column(String, ForeignKey("classes.id", ondelete="CASCADE"), primary_key=True)
    student_id = Column(String, ForeignKey("students.id", ondelete="CASCADE"), primary_key=True)

    class_ = relationship("Class", back_populates="roster")
    student = relationship("Student")


class InstanceEnrollment(Base):
    __tablename__ = "instance_enrollments"
    __table_args__ = (UniqueConstraint("class_instance_id", "student_id", name="uix_instance_student"),)

    id = Column(String, primary_key=True, index=True, default=lambda: generate_id("enr"))
    class_instance_id = Column(String, ForeignKey("class_instances.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(String, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)

    instance = relationship("ClassInstance", back_populates="enrollments")
    student = relationship("Student")
    attendance = relationship(
        "AttendanceRecord", back_populates="enrollment", uselist=False, cascade="all, delete-orphan",
    )


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"

    id = Column(String, primary_key=True, index=True, default=lambda: generate_id("att"))
    instance_enrollment_id = Column(
        String, ForeignKey("instance_enrollments.id", ondelete="CASCADE"), unique=True, nullable=False,
    )
    status = Column(String, nullable=False)  # present, late, authorised, unauthorised
    notes = Column(String, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    enrollment = relationship("InstanceEnrollment", back_populates="attendance")
