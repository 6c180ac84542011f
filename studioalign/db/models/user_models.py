# /studioalign/db/models/user_models.py

"""
SQLAlchemy models for login credentials and the three role tables.

A `User` holds only credentials. Which role the user plays is decided by the
role table that holds a row pointing back at it: `owners`, `teachers` or
`parents`. Teachers and parents belong to a studio; owners own one.
"""

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..base_class import Base, generate_id


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True, default=lambda: generate_id("usr"))
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Owner(Base):
    __tablename__ = "owners"

    id = Column(String, primary_key=True, index=True, default=lambda: generate_id("own"))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    studios = relationship("Studio", back_populates="owner")


class Teacher(Base):
    __tablename__ = "teachers"

    id = Column(String, primary_key=True, index=True, default=lambda: generate_id("tch"))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=True, index=True)
    studio_id = Column(String, ForeignKey("studios.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    studio = relationship("Studio", back_populates="teachers")


class Parent(Base):
    __tablename__ = "parents"

    id = Column(String, primary_key=True, index=True, default=lambda: generate_id("par"))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=True, index=True)
    studio_id = Column(String, ForeignKey("studios.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    studio = relationship("Studio", back_populates="parents")
    students = relationship("Student", back_populates="parent")
