# /studioalign/services/attendance_service.py

"""
Attendance recording for one dated class instance.

An instance's enrollments are created lazily: the first time anyone opens the
attendance sheet of an instance that has none, the class's standing roster is
copied onto it. From then on the sheet is independent of later roster edits.
"""

import logging
from datetime import date
from typing import List

import pandas as pd

from ..core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from ..core.roles import Role
from ..models.attendance_model import (
    AttendanceRecordIn,
    AttendanceRow,
    AttendanceSheet,
    AttendanceStatus,
)
from .class_helpers.calendar import occurs_on
from .database_service import DatabaseService
from .studio_service import StudioContext

logger = logging.getLogger(__name__)


def get_or_create_class_instance(ctx: StudioContext, class_id: str, on_date: date, db: DatabaseService):
    """
    Returns the instance row of `class_id` on `on_date`, generating it when
    the date is a valid occurrence that has not been materialized yet.
    """
    class_ = db.get_class_by_id(class_id, ctx.studio_id)
    if class_ is None:
        raise NotFoundError(f"Class with ID {class_id} not found.")
    if not occurs_on(class_, on_date):
        raise ValidationError(f"Class '{class_.name}' does not take place on {on_date.isoformat()}.")

    instance = db.get_class_instance(class_id, on_date)
    if instance is not None:
        return instance

    if class_.is_recurring:
        db.ensure_class_materialized(class_id, on_date)
        instance = db.get_class_instance(class_id, on_date)
        if instance is not None:
            return instance
        # Materialized range already covers this date, so the row was deleted.
        raise NotFoundError(f"Class '{class_.name}' on {on_date.isoformat()} has been cancelled.")

    return db.create_class_instance(class_id, on_date)


def _get_instance_or_404(ctx: StudioContext, instance_id: str, db: DatabaseService):
    instance = db.get_class_instance_by_id(instance_id, ctx.studio_id)
    if instance is None:
        raise NotFoundError(f"Class instance with ID {instance_id} not found.")
    return instance


def get_attendance_sheet(ctx: StudioContext, instance_id: str, db: DatabaseService) -> AttendanceSheet:
    """
    One row per enrolled student, `attendance` left as None until marked.
    Parents get the rows of their own children only.
    """
    instance = _get_instance_or_404(ctx, instance_id, db)

    enrollments = db.get_instance_enrollments(instance.id)
    if not enrollments:
        enrollments = db.create_instance_enrollments_from_roster(instance.id, instance.class_id)
        logger.info("Created %d enrollments for instance %s from roster", len(enrollments), instance.id)

    if ctx.user.role is Role.PARENT:
        enrollments = [e for e in enrollments if e.student.parent_id == ctx.user.profile_id]

    rows = [
        AttendanceRow(
            instance_enrollment_id=e.id,
            student_id=e.student_id,
            student_name=e.student.name,
            attendance=e.attendance.status if e.attendance else None,
            notes=e.attendance.notes if e.attendance else None,
        )
        for e in enrollments
    ]
    rows.sort(key=lambda row: row.student_name)
    return AttendanceSheet(
        instance_id=instance.id,
        class_id=instance.class_id,
        class_name=instance.name,
        date=instance.date,
        rows=rows,
    )


def save_attendance(
    ctx: StudioContext,
    instance_id: str,
    records: List[AttendanceRecordIn],
    db: DatabaseService,
) -> int:
    """
    Upserts the records in one transaction. Every record must point at an
    enrollment of this instance; otherwise nothing is written.
    """
    if ctx.user.role is Role.PARENT:
        raise PermissionDeniedError("Parents cannot record attendance.")
    instance = _get_instance_or_404(ctx, instance_id, db)

    enrollment_ids = {e.id for e in db.get_instance_enrollments(instance.id)}
    unknown = [r.instance_enrollment_id for r in records if r.instance_enrollment_id not in enrollment_ids]
    if unknown:
        raise ValidationError(f"Enrollments not part of this class instance: {', '.join(unknown)}.")

    payload = [
        {
            "instance_enrollment_id": r.instance_enrollment_id,
            "status": AttendanceStatus(r.status).value,
            "notes": r.notes,
        }
        for r in records
    ]
    saved = db.upsert_attendance_records(payload)
    logger.info("Saved %d attendance records for instance %s", saved, instance.id)
    return saved


def export_attendance_as_csv(ctx: StudioContext, instance_id: str, db: DatabaseService) -> str:
    sheet = get_attendance_sheet(ctx, instance_id, db)
    export_data = [
        {
            "Student Name": row.student_name,
            "Attendance": row.attendance.value if row.attendance else "",
            "Notes": row.notes or "",
            "Class Name": sheet.class_name,
            "Date": sheet.date.isoformat(),
        }
        for row in sheet.rows
    ]
    columns = ["Student Name", "Attendance", "Notes", "Class Name", "Date"]
    return pd.DataFrame(export_data, columns=columns).to_csv(index=False)
