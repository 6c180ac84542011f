# /studioalign/routers/invoices_router.py

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status

from ..core.deps import studio_context_for
from ..core.exceptions import StudioAlignError, to_http_exception
from ..core.roles import Role
from ..models import invoice_model
from ..services import invoice_service
from ..services.database_service import DatabaseService, get_db_service
from ..services.studio_service import StudioContext

router = APIRouter()

owner_context = studio_context_for(Role.OWNER)

# --- INVOICE COLLECTION ENDPOINTS (/api/invoices) ---

@router.get("", response_model=List[invoice_model.Invoice], summary="List Invoices")
def list_invoices(
    status_filter: Optional[invoice_model.InvoiceStatus] = Query(default=None, alias="status"),
    search: Optional[str] = Query(default=None, description="Matches invoice number, parent name or email."),
    ctx: StudioContext = Depends(owner_context),
    db: DatabaseService = Depends(get_db_service),
):
    return invoice_service.list_invoices(ctx, db, status=status_filter, search=search)


@router.post("", response_model=invoice_model.Invoice, status_code=status.HTTP_201_CREATED, summary="Create a Draft Invoice")
def create_invoice(
    invoice_in: invoice_model.InvoiceCreate,
    ctx: StudioContext = Depends(owner_context),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        return invoice_service.create_invoice(ctx, invoice_in, db)
    except StudioAlignError as e:
        raise to_http_exception(e)


@router.get("/counts", response_model=Dict[str, int], summary="Count Invoices per Status")
def count_invoices(ctx: StudioContext = Depends(owner_context), db: DatabaseService = Depends(get_db_service)):
    return invoice_service.count_by_status(ctx, db)

# --- PRICING PLAN ENDPOINTS (/api/invoices/plans) ---

@router.get("/plans", response_model=List[invoice_model.PricingPlan], summary="List Pricing Plans")
def list_plans(ctx: StudioContext = Depends(owner_context), db: DatabaseService = Depends(get_db_service)):
    return invoice_service.list_pricing_plans(ctx, db)


@router.post("/plans", response_model=invoice_model.PricingPlan, status_code=status.HTTP_201_CREATED, summary="Create a Pricing Plan")
def create_plan(
    plan_in: invoice_model.PricingPlanCreate,
    ctx: StudioContext = Depends(owner_context),
    db: DatabaseService = Depends(get_db_service),
):
    return invoice_service.create_pricing_plan(ctx, plan_in, db)


@router.post("/plans/{plan_id}/enrollments", response_model=invoice_model.PlanEnrollment, status_code=status.HTTP_201_CREATED, summary="Enroll a Student in a Plan")
def enroll_in_plan(
    plan_id: str,
    enrollment_in: invoice_model.PlanEnrollmentCreate,
    ctx: StudioContext = Depends(owner_context),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        return invoice_service.enroll_student_in_plan(ctx, plan_id, enrollment_in.student_id, db)
    except StudioAlignError as e:
        raise to_http_exception(e)

# --- INDIVIDUAL INVOICE ENDPOINTS (/api/invoices/{invoice_id}) ---

@router.get("/{invoice_id}", response_model=invoice_model.Invoice, summary="Get an Invoice")
def get_invoice(invoice_id: str, ctx: StudioContext = Depends(owner_context), db: DatabaseService = Depends(get_db_service)):
    try:
        return invoice_service.get_invoice(ctx, invoice_id, db)
    except StudioAlignError as e:
        raise to_http_exception(e)


@router.patch("/{invoice_id}/status", response_model=invoice_model.Invoice, summary="Change an Invoice's Status")
def update_invoice_status(
    invoice_id: str,
    status_update: invoice_model.InvoiceStatusUpdate,
    ctx: StudioContext = Depends(owner_context),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        return invoice_service.update_status(ctx, invoice_id, status_update.status, db)
    except StudioAlignError as e:
        raise to_http_exception(e)
