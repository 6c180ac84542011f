# /studioalign/models/invoice_model.py

# --- Core Imports ---
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict

# --- Enumerations ---

class InvoiceItemType(str, Enum):
    TUITION = "tuition"
    COSTUME = "costume"
    REGISTRATION = "registration"
    OTHER = "other"


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"

# --- Invoice Models ---

class InvoiceItemIn(BaseModel):
    description: str = Field(..., min_length=1)
    quantity: int = Field(default=1, ge=1)
    unit_price: Decimal = Field(..., ge=0)
    type: InvoiceItemType = InvoiceItemType.OTHER
    student_id: Optional[str] = None
    plan_enrollment_id: Optional[str] = None


class InvoiceItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    description: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    total: Decimal
    type: InvoiceItemType
    student_id: Optional[str] = None
    plan_enrollment_id: Optional[str] = None


class InvoiceCreate(BaseModel):
    """
    New draft invoice for a parent. When `items` is omitted the invoice is
    built from the tuition plans the parent's students are enrolled in.
    """
    parent_id: str
    due_date: Optional[date] = None
    notes: Optional[str] = None
    tax: Decimal = Field(default=Decimal("0"), ge=0)
    items: Optional[List[InvoiceItemIn]] = None


class Invoice(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    number: str
    status: InvoiceStatus
    parent_id: str
    parent_name: Optional[str] = None
    parent_email: Optional[str] = None
    due_date: date
    notes: Optional[str] = None
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    created_at: datetime
    items: List[InvoiceItem] = Field(default_factory=list)


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus

# --- Pricing Plan Models ---

class PricingPlanCreate(BaseModel):
    name: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0)


class PricingPlan(PricingPlanCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str


class PlanEnrollmentCreate(BaseModel):
    student_id: str


class PlanEnrollment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    plan_id: str
    student_id: str
