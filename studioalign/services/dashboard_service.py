# /studioalign/services/dashboard_service.py

# --- Core Imports ---
from datetime import date
from typing import Optional

import pandas as pd

from ..core.roles import Role, navigation_for_role
from ..models.dashboard_model import DashboardOverview
from . import class_service, invoice_service, messaging_service
from .database_service import DatabaseService
from .studio_service import StudioContext

# --- Core Public Function ---

def get_overview(ctx: StudioContext, db: DatabaseService, today: Optional[date] = None) -> DashboardOverview:
    """
    Assembles the overview cards for the caller's role. Owners see studio
    totals and invoice counts, teachers their own classes and the students
    on them, parents their children and the classes those children attend.
    """
    role = ctx.user.role
    invoice_counts = {}
    teacher_count = 0

    if role is Role.OWNER:
        classes = db.get_classes_for_studio(ctx.studio_id)
        student_count = len(db.get_students(ctx.studio_id))
        teacher_count = len(db.get_teachers(ctx.studio_id))
        invoice_counts = invoice_service.count_by_status(ctx, db)
    elif role is Role.TEACHER:
        classes = db.get_classes_for_studio(ctx.studio_id, teacher_id=ctx.user.profile_id)
        roster_df = pd.DataFrame(
            [{"student_id": e.student_id} for e in db.get_roster_entries([c.id for c in classes])],
            columns=["student_id"],
        )
        student_count = int(roster_df["student_id"].nunique())
    elif role is Role.PARENT:
        studio_classes = db.get_classes_for_studio(ctx.studio_id)
        enrolled = db.get_roster_for_parent([c.id for c in studio_classes], ctx.user.profile_id)
        classes = [c for c in studio_classes if c.id in enrolled]
        student_count = len(db.get_students_for_parent(ctx.user.profile_id))
    else:
        raise ValueError(f"Unhandled role: {role!r}")

    week = class_service.get_week_calendar(ctx, today or date.today(), db)
    if role is Role.PARENT:
        classes_this_week = sum(1 for day in week.days for occ in day.occurrences if occ.enrolled_students)
    else:
        classes_this_week = sum(len(day.occurrences) for day in week.days)

    unread = sum(c.unread_count for c in messaging_service.list_conversations(ctx.user.user_id, db))

    return DashboardOverview(
        role=role,
        class_count=len(classes),
        student_count=student_count,
        teacher_count=teacher_count,
        classes_this_week=classes_this_week,
        unread_messages=unread,
        invoice_counts=invoice_counts,
        navigation=navigation_for_role(role),
    )
