# /studioalign/services/database_helpers/invoice_repository_sql.py

"""
Queries for invoices, invoice items and the pricing plans that feed them.

Unlike the other multi-table writes in this package, an invoice is saved as
two separate commits (`add_invoice`, then `add_invoice_items`). Nothing
removes the header if the second commit fails.
"""

from typing import Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import joinedload, selectinload

from ...db.models.invoice_models import Invoice, InvoiceItem, PlanEnrollment, PricingPlan
from ...db.models.studio_models import Student
from ...db.models.user_models import Parent
from .base_repository_sql import BaseRepositorySQL


class InvoiceRepositorySQL(BaseRepositorySQL):

    # --- Invoice Reads ---

    def get_invoices(self, studio_id: str, status: Optional[str] = None, search: Optional[str] = None) -> List[Invoice]:
        query = (
            self.db.query(Invoice)
            .join(Parent, Invoice.parent_id == Parent.id)
            .options(joinedload(Invoice.parent))
            .filter(Invoice.studio_id == studio_id)
        )
        if status:
            query = query.filter(Invoice.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Invoice.number.ilike(pattern),
                Parent.name.ilike(pattern),
                Parent.email.ilike(pattern),
            ))
        return query.order_by(Invoice.created_at.desc()).all()

    def get_invoice_by_id(self, invoice_id: str, studio_id: str) -> Optional[Invoice]:
        return (
            self.db.query(Invoice)
            .options(joinedload(Invoice.parent), selectinload(Invoice.items))
            .filter(Invoice.id == invoice_id, Invoice.studio_id == studio_id)
            .first()
        )

    def count_invoices_by_status(self, studio_id: str) -> Dict[str, int]:
        rows = (
            self.db.query(Invoice.status, func.count(Invoice.id))
            .filter(Invoice.studio_id == studio_id)
            .group_by(Invoice.status)
            .all()
        )
        return {status: count for status, count in rows}

    def count_invoices_since(self, studio_id: str, prefix: str) -> int:
        return (
            self.db.query(func.count(Invoice.id))
            .filter(Invoice.studio_id == studio_id, Invoice.number.like(f"{prefix}%"))
            .scalar()
        )

    # --- Invoice Writes ---

    def add_invoice(self, record: Dict) -> Invoice:
        invoice = Invoice(**record)
        with self.transaction():
            self.db.add(invoice)
        self.db.refresh(invoice)
        return invoice

    def add_invoice_items(self, invoice_id: str, items: List[Dict]) -> List[InvoiceItem]:
        new_items = [InvoiceItem(invoice_id=invoice_id, **item) for item in items]
        with self.transaction():
            self.db.add_all(new_items)
        return new_items

    def update_invoice_status(self, invoice_id: str, studio_id: str, status: str) -> Optional[Invoice]:
        invoice = self.get_invoice_by_id(invoice_id, studio_id)
        if invoice is None:
            return None
        with self.transaction():
            invoice.status = status
        self.db.refresh(invoice)
        return invoice

    # --- Pricing Plan Methods ---

    def get_plan_enrollments_for_parent(self, parent_id: str) -> List[PlanEnrollment]:
        return (
            self.db.query(PlanEnrollment)
            .join(Student, PlanEnrollment.student_id == Student.id)
            .options(joinedload(PlanEnrollment.plan), joinedload(PlanEnrollment.student))
            .filter(Student.parent_id == parent_id)
            .order_by(Student.name)
            .all()
        )

    def get_pricing_plans(self, studio_id: str) -> List[PricingPlan]:
        return self.db.query(PricingPlan).filter(PricingPlan.studio_id == studio_id).order_by(PricingPlan.name).all()

    def get_pricing_plan_by_id(self, plan_id: str, studio_id: str) -> Optional[PricingPlan]:
        return self.db.query(PricingPlan).filter(PricingPlan.id == plan_id, PricingPlan.studio_id == studio_id).first()

    def add_pricing_plan(self, record: Dict) -> PricingPlan:
        plan = PricingPlan(**record)
        with self.transaction():
            self.db.add(plan)
        self.db.refresh(plan)
        return plan

    def add_plan_enrollment(self, plan_id: str, student_id: str) -> PlanEnrollment:
        enrollment = PlanEnrollment(plan_id=plan_id, student_id=student_id)
        with self.transaction():
            self.db.add(enrollment)
        self.db.refresh(enrollment)
        return enrollment
