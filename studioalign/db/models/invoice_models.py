# /studioalign/db/models/invoice_models.py

"""
SQLAlchemy models for billing: pricing plans, the students enrolled on them,
and parent-billed invoices with their line items. Money columns use
`Numeric(10, 2)` so amounts round-trip as `Decimal`.
"""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from ..base_class import Base, generate_id, utcnow


class PricingPlan(Base):
    __tablename__ = "pricing_plans"

    id = Column(String, primary_key=True, index=True, default=lambda: generate_id("pln"))
    studio_id = Column(String, ForeignKey("studios.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)


class PlanEnrollment(Base):
    __tablename__ = "plan_enrollments"

    id = Column(String, primary_key=True, index=True, default=lambda: generate_id("ple"))
    student_id = Column(String, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    plan_id = Column(String, ForeignKey("pricing_plans.id", ondelete="CASCADE"), nullable=False)

    student = relationship("Student")
    plan = relationship("PricingPlan")


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(String, primary_key=True, index=True, default=lambda: generate_id("inv"))
    studio_id = Column(String, ForeignKey("studios.id", ondelete="CASCADE"), nullable=False, index=True)
    parent_id = Column(String, ForeignKey("parents.id", ondelete="CASCADE"), nullable=False, index=True)
    number = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, default="draft")
    due_date = Column(Date, nullable=False)
    notes = Column(String, nullable=True)
    subtotal = Column(Numeric(10, 2), nullable=False, default=0)
    tax = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    parent = relationship("Parent")
    items = relationship("InvoiceItem", back_populates="invoice", cascade="all, delete-orphan")


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(String, primary_key=True, index=True, default=lambda: generate_id("itm"))
    invoice_id = Column(String, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(String, ForeignKey("students.id", ondelete="SET NULL"), nullable=True)
    description = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(10, 2), nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)
    type = Column(String, nullable=False, default="tuition")
    plan_enrollment_id = Column(String, ForeignKey("plan_enrollments.id", ondelete="SET NULL"), nullable=True)

    invoice = relationship("Invoice", back_populates="items")
