# /studioalign/services/invoice_service.py

"""
Invoice composition for the studio owner.

Money is handled as `Decimal` throughout and rounded to cents with
ROUND_HALF_UP. An invoice is written in two steps, header then items, each
its own commit. If the items fail to save the header stays behind as an
empty draft; the failure is logged with the draft's id and re-raised.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..core.exceptions import NotFoundError, ValidationError
from ..models.invoice_model import (
    Invoice,
    InvoiceCreate,
    InvoiceItemType,
    InvoiceStatus,
    PricingPlanCreate,
)
from .database_service import DatabaseService
from .studio_service import StudioContext

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
DEFAULT_PAYMENT_TERMS_DAYS = 14


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_totals(items: Iterable[Dict], tax=Decimal("0")) -> Dict[str, Decimal]:
    """
    Sums quantity x unit_price over `items`. Tax is added on top and defaults
    to zero, in which case subtotal and total are equal.
    """
    subtotal = sum((_money(item["quantity"] * _money(item["unit_price"])) for item in items), Decimal("0"))
    subtotal = _money(subtotal)
    tax = _money(tax)
    return {"subtotal": subtotal, "tax": tax, "total": _money(subtotal + tax)}


def _priced_item(item: Dict) -> Dict:
    line = _money(item["quantity"] * _money(item["unit_price"]))
    return {**item, "unit_price": _money(item["unit_price"]), "subtotal": line, "total": line}


def build_items_from_enrollments(parent_id: str, db: DatabaseService) -> List[Dict]:
    """One tuition line per pricing-plan enrollment of the parent's students."""
    return [
        {
            "description": f"{enrollment.plan.name} - {enrollment.student.name}",
            "quantity": 1,
            "unit_price": _money(enrollment.plan.amount),
            "type": InvoiceItemType.TUITION.value,
            "student_id": enrollment.student_id,
            "plan_enrollment_id": enrollment.id,
        }
        for enrollment in db.get_plan_enrollments_for_parent(parent_id)
    ]


def next_invoice_number(studio_id: str, db: DatabaseService, today: Optional[date] = None) -> str:
    """`INV-YYYYMM-NNNN`, numbered per studio within the month."""
    prefix = f"INV-{(today or date.today()):%Y%m}-"
    return f"{prefix}{db.count_invoices_since(studio_id, prefix) + 1:04d}"


def to_invoice_model(invoice) -> Invoice:
    result = Invoice.model_validate(invoice)
    if invoice.parent is not None:
        result.parent_name = invoice.parent.name
        result.parent_email = invoice.parent.email
    return result


def create_invoice(ctx: StudioContext, invoice_in: InvoiceCreate, db: DatabaseService) -> Invoice:
    parent = db.get_parent_by_id(invoice_in.parent_id, ctx.studio_id)
    if parent is None:
        raise NotFoundError(f"Parent with ID {invoice_in.parent_id} not found.")

    if invoice_in.items is not None:
        raw_items = [item.model_dump(mode="json") for item in invoice_in.items]
    else:
        raw_items = build_items_from_enrollments(parent.id, db)
    if not raw_items:
        raise ValidationError("An invoice needs at least one item.")

    items = [_priced_item(item) for item in raw_items]
    totals = calculate_totals(items, invoice_in.tax)

    invoice = db.add_invoice({
        "studio_id": ctx.studio_id,
        "parent_id": parent.id,
        "number": next_invoice_number(ctx.studio_id, db),
        "status": InvoiceStatus.DRAFT.value,
        "due_date": invoice_in.due_date or date.today() + timedelta(days=DEFAULT_PAYMENT_TERMS_DAYS),
        "notes": invoice_in.notes,
        **totals,
    })
    try:
        db.add_invoice_items(invoice.id, items)
    except SQLAlchemyError:
        logger.error("Invoice %s was saved without its items", invoice.id)
        raise

    logger.info("Created invoice %s (%s) for parent %s", invoice.number, invoice.id, parent.id)
    return to_invoice_model(db.get_invoice_by_id(invoice.id, ctx.studio_id))


def get_invoice(ctx: StudioContext, invoice_id: str, db: DatabaseService) -> Invoice:
    invoice = db.get_invoice_by_id(invoice_id, ctx.studio_id)
    if invoice is None:
        raise NotFoundError(f"Invoice with ID {invoice_id} not found.")
    return to_invoice_model(invoice)


def list_invoices(
    ctx: StudioContext,
    db: DatabaseService,
    status: Optional[InvoiceStatus] = None,
    search: Optional[str] = None,
) -> List[Invoice]:
    status_value = InvoiceStatus(status).value if status else None
    return [to_invoice_model(i) for i in db.get_invoices(ctx.studio_id, status_value, search)]


def count_by_status(ctx: StudioContext, db: DatabaseService) -> Dict[str, int]:
    counts = db.count_invoices_by_status(ctx.studio_id)
    return {status.value: counts.get(status.value, 0) for status in InvoiceStatus}


def update_status(ctx: StudioContext, invoice_id: str, status: InvoiceStatus, db: DatabaseService) -> Invoice:
    invoice = db.update_invoice_status(invoice_id, ctx.studio_id, InvoiceStatus(status).value)
    if invoice is None:
        raise NotFoundError(f"Invoice with ID {invoice_id} not found.")
    logger.info("Invoice %s is now %s", invoice.number, invoice.status)
    return to_invoice_model(invoice)


# --- Pricing Plans ---

def list_pricing_plans(ctx: StudioContext, db: DatabaseService):
    return db.get_pricing_plans(ctx.studio_id)


def create_pricing_plan(ctx: StudioContext, plan_in: PricingPlanCreate, db: DatabaseService):
    return db.add_pricing_plan({"studio_id": ctx.studio_id, "name": plan_in.name, "amount": _money(plan_in.amount)})


def enroll_student_in_plan(ctx: StudioContext, plan_id: str, student_id: str, db: DatabaseService):
    if db.get_pricing_plan_by_id(plan_id, ctx.studio_id) is None:
        raise NotFoundError(f"Pricing plan with ID {plan_id} not found.")
    if not db.get_students_by_ids([student_id], ctx.studio_id):
        raise NotFoundError(f"Student with ID {student_id} not found.")
    return db.add_plan_enrollment(plan_id, student_id)
