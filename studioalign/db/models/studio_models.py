# /studioalign/db/models/studio_models.py

from sqlalchemy import Column, String, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..base_class import Base, generate_id


class Studio(Base):
    """
    The tenant. Classes, teachers, parents, students and locations all hang
    off a studio, and every query in the repositories is scoped by
    `studio_id`.
    """
    __tablename__ = "studios"

    id = Column(String, primary_key=True, index=True, default=lambda: generate_id("std"))
    owner_id = Column(String, ForeignKey("owners.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    owner = relationship("Owner", back_populates="studios")
    teachers = relationship("Teacher", back_populates="studio", cascade="all, delete-orphan")
    parents = relationship("Parent", back_populates="studio", cascade="all, delete-orphan")
    locations = relationship("Location", back_populates="studio", cascade="all, delete-orphan")


class Location(Base):
    """A room or venue in which classes are held."""
    __tablename__ = "locations"

    id = Column(String, primary_key=True, index=True, default=lambda: generate_id("loc"))
    studio_id = Column(String, ForeignKey("studios.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    address = Column(String, nullable=True)

    studio = relationship("Studio", back_populates="locations")


class Student(Base):
    __tablename__ = "students"

    id = Column(String, primary_key=True, index=True, default=lambda: generate_id("stu"))
    studio_id = Column(String, ForeignKey("studios.id", ondelete="CASCADE"), nullable=False, index=True)
    parent_id = Column(String, ForeignKey("parents.id", ondelete="SET NULL"), nullable=True, index=True)
    name = Column(String, index=True, nullable=False)
    date_of_birth = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    parent = relationship("Parent", back_populates="students")
