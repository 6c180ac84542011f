# /studioalign/services/class_service.py

"""
This service module is the business logic layer for class templates, their
calendar occurrences and the standing roster.

It orchestrates the pure calendar helpers in `class_helpers.calendar`, the
scope resolution in `class_helpers.scope` and the `DatabaseService`. Every
function takes an explicit `StudioContext`, so all reads and writes are
scoped to the caller's studio and, where the role calls for it, narrowed
further (teachers see the classes they teach; parents see which of their
children are on each roster).
"""

import logging
from dataclasses import asdict
from datetime import date, timedelta
from typing import Dict, List, Optional

import pandas as pd

from ..core import config
from ..core.exceptions import NotFoundError, ValidationError
from ..core.roles import Role
from ..models import class_model
from .class_helpers import calendar, scope
from .database_service import DatabaseService
from .studio_service import StudioContext, get_reference_data

logger = logging.getLogger(__name__)


# --- Validation Helpers ---

def _get_class_or_404(ctx: StudioContext, class_id: str, db: DatabaseService):
    class_ = db.get_class_by_id(class_id, ctx.studio_id)
    if class_ is None:
        raise NotFoundError(f"Class with ID {class_id} not found.")
    return class_


def _check_references(
    ctx: StudioContext,
    db: DatabaseService,
    teacher_id: Optional[str] = None,
    location_id: Optional[str] = None,
    student_ids: Optional[List[str]] = None,
) -> None:
    """Every id a class points at must belong to the caller's studio."""
    if teacher_id is not None and db.get_teacher_by_id(teacher_id, ctx.studio_id) is None:
        raise ValidationError(f"Teacher with ID {teacher_id} is not part of this studio.")
    if location_id is not None and db.get_location_by_id(location_id, ctx.studio_id) is None:
        raise ValidationError(f"Location with ID {location_id} is not part of this studio.")
    if student_ids:
        wanted = set(student_ids)
        found = {s.id for s in db.get_students_by_ids(list(wanted), ctx.studio_id)}
        missing = wanted - found
        if missing:
            raise ValidationError(f"Unknown students: {', '.join(sorted(missing))}.")


# --- Template CRUD ---

def create_class(ctx: StudioContext, class_in: class_model.ClassCreate, db: DatabaseService):
    """
    Creates a class template and precomputes its instance rows.

    A recurring class without a start date starts today. Its instances are
    generated up to its end date, or `RECURRENCE_HORIZON_WEEKS` ahead when it
    has none; later weeks are filled in on demand.
    """
    _check_references(ctx, db, class_in.teacher_id, class_in.location_id, class_in.student_ids)

    if class_in.is_recurring:
        template = class_in.model_copy(update={"date": None, "start_date": class_in.start_date or date.today()})
    else:
        template = class_in.model_copy(update={"day_of_week": None, "start_date": None, "end_date": None})

    window_start, window_end = calendar.expansion_window(template, config.RECURRENCE_HORIZON_WEEKS)
    instance_dates = calendar.occurrence_dates(template, window_start, window_end)
    if not instance_dates:
        raise ValidationError("This schedule has no occurrences between its start and end dates.")

    record = {"studio_id": ctx.studio_id, **template.model_dump(exclude={"student_ids"})}
    new_class = db.add_class(record=record, instance_dates=instance_dates, student_ids=class_in.student_ids)
    logger.info("Created class %s with %d instances", new_class.id, len(instance_dates))
    return new_class


def get_class(ctx: StudioContext, class_id: str, db: DatabaseService):
    return _get_class_or_404(ctx, class_id, db)


def list_classes(ctx: StudioContext, db: DatabaseService) -> List[Dict]:
    """
    Classes visible to the caller, enriched with display names and roster
    counts. Owners and parents see the whole studio; teachers see only the
    classes they teach. Parents also get the names of their own children on
    each roster.
    """
    role = ctx.user.role
    if role is Role.TEACHER:
        classes = db.get_classes_for_studio(ctx.studio_id, teacher_id=ctx.user.profile_id)
    elif role in (Role.OWNER, Role.PARENT):
        classes = db.get_classes_for_studio(ctx.studio_id)
    else:
        raise ValueError(f"Unhandled role: {role!r}")
    if not classes:
        return []

    class_ids = [c.id for c in classes]
    roster_df = pd.DataFrame(
        [{"class_id": e.class_id, "student_id": e.student_id} for e in db.get_roster_entries(class_ids)]
    )
    student_counts = {}
    if not roster_df.empty:
        student_counts = roster_df.groupby("class_id").size().to_dict()

    enrolled = db.get_roster_for_parent(class_ids, ctx.user.profile_id) if role is Role.PARENT else {}
    reference = get_reference_data(ctx, db)

    summary_list = []
    for cls in classes:
        summary = class_model.Class.model_validate(cls).model_dump()
        summary.update({
            "teacher_name": reference.teacher_name(cls.teacher_id),
            "location_name": reference.location_name(cls.location_id),
            "student_count": int(student_counts.get(cls.id, 0)),
            "enrolled_students": [s.name for s in enrolled.get(cls.id, [])],
        })
        summary_list.append(summary)
    return summary_list


# --- Calendar ---

def get_week_calendar(ctx: StudioContext, week_of: date, db: DatabaseService) -> class_model.WeekCalendar:
    """
    The Sunday-based week containing `week_of`, one entry per day, built from
    instance rows. Open-ended series are extended first if the week lies
    beyond what has been generated so far.
    """
    start = calendar.week_start(week_of)
    end = start + timedelta(days=6)
    teacher_id = ctx.user.profile_id if ctx.user.role is Role.TEACHER else None

    for class_ in db.get_classes_for_studio(ctx.studio_id, teacher_id=teacher_id):
        if not class_.is_recurring:
            continue
        through = end if class_.end_date is None else min(end, class_.end_date)
        if class_.materialized_through is not None and class_.materialized_through >= through:
            continue
        db.ensure_class_materialized(class_.id, end)

    instances = db.get_instances_in_range(ctx.studio_id, start, end, teacher_id=teacher_id)
    by_day = calendar.group_instances_by_day(instances, start)

    enrolled = {}
    if ctx.user.role is Role.PARENT:
        enrolled = db.get_roster_for_parent(list({i.class_id for i in instances}), ctx.user.profile_id)

    days = []
    for day in calendar.week_days(start):
        occurrences = [
            class_model.CalendarOccurrence(
                **asdict(occ),
                enrolled_students=[s.name for s in enrolled.get(occ.class_id, [])],
            )
            for occ in by_day[day]
        ]
        days.append(class_model.CalendarDay(
            date=day,
            day_name=calendar.DAY_NAMES[calendar.day_of_week(day)],
            occurrences=occurrences,
        ))
    return class_model.WeekCalendar(week_start=start, days=days)


def get_class_instances(ctx: StudioContext, class_id: str, db: DatabaseService):
    _get_class_or_404(ctx, class_id, db)
    return db.get_instances_for_class(class_id)


# --- Scoped Edit & Delete ---

def edit_class(ctx: StudioContext, class_id: str, edit: class_model.ClassEdit, db: DatabaseService) -> scope.ScopeResult:
    """
    Edits the occurrence on `edit.target_date` with the requested scope and,
    when `student_ids` is supplied, replaces the standing roster.
    """
    class_ = _get_class_or_404(ctx, class_id, db)
    changes = scope.ClassChanges.from_model(edit)
    if not changes.as_dict() and edit.student_ids is None:
        raise ValidationError("No update data provided.")
    _check_references(ctx, db, edit.teacher_id, edit.location_id, edit.student_ids)

    if changes.as_dict():
        result = scope.apply_edit(db, class_, edit.target_date, edit.scope, changes)
    else:
        # A roster change belongs to the class as a whole and needs no scope.
        result = scope.ScopeResult(scope=scope.Scope.ALL, affected=0)
    if edit.student_ids is not None:
        db.replace_roster(class_id, edit.student_ids)
    return result


def delete_class_occurrence(
    ctx: StudioContext,
    class_id: str,
    target_date: date,
    requested_scope: Optional[scope.Scope],
    db: DatabaseService,
) -> scope.ScopeResult:
    class_ = _get_class_or_404(ctx, class_id, db)
    return scope.apply_delete(db, class_, target_date, requested_scope)


def bulk_update_instances(
    ctx: StudioContext,
    class_id: str,
    bulk: class_model.BulkInstanceUpdate,
    db: DatabaseService,
) -> int:
    """Applies the same changes to an explicit list of one class's instances."""
    _get_class_or_404(ctx, class_id, db)
    changes = scope.ClassChanges.from_model(bulk)
    update = changes.instance_changes()
    if not update:
        raise ValidationError("No update data provided.")
    changes.check_required()
    instance_ids = list(dict.fromkeys(bulk.instance_ids))
    selected = set(instance_ids)
    scope.check_times([i for i in db.get_instances_for_class(class_id) if i.id in selected], update)
    _check_references(ctx, db, bulk.teacher_id, bulk.location_id)
    affected = db.bulk_update_class_instances(class_id, instance_ids, update)
    logger.info("Bulk updated %d instances of class %s", affected, class_id)
    return affected


# --- Roster ---

def get_roster(ctx: StudioContext, class_id: str, db: DatabaseService):
    _get_class_or_404(ctx, class_id, db)
    return db.get_roster(class_id)


def replace_roster(ctx: StudioContext, class_id: str, student_ids: List[str], db: DatabaseService):
    _get_class_or_404(ctx, class_id, db)
    _check_references(ctx, db, student_ids=student_ids)
    db.replace_roster(class_id, student_ids)
    return db.get_roster(class_id)


def export_roster_as_csv(ctx: StudioContext, class_id: str, db: DatabaseService) -> str:
    """CSV of the class's standing roster with each student's parent."""
    class_ = _get_class_or_404(ctx, class_id, db)
    students = db.get_roster(class_id)

    export_data = [
        {
            "Student Name": s.name,
            "Date of Birth": s.date_of_birth.isoformat() if s.date_of_birth else "",
            "Parent": s.parent.name if s.parent else "",
            "Parent Email": s.parent.email if s.parent else "",
            "Class Name": class_.name,
        }
        for s in students
    ]
    columns = ["Student Name", "Date of Birth", "Parent", "Parent Email", "Class Name"]
    df = pd.DataFrame(export_data, columns=columns)
    return df.to_csv(index=False)
