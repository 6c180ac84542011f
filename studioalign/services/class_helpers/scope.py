# /studioalign/services/class_helpers/scope.py

"""
Scope resolution for edits and deletes made on one displayed occurrence of a
class.

The caller picks an occurrence on the calendar (a class id plus a concrete
date) and a scope. This module turns that choice into exactly one repository
call; every such call runs inside a single database transaction, so a scoped
change either lands on all of its rows or on none of them.

Schedule fields (recurrence, weekday, dates) belong to the template as a
whole and can only change with scope `all`, or on a one-off class. Such an
edit regenerates the instance rows in the same transaction.
"""

import datetime
import logging
from dataclasses import dataclass, fields
from datetime import date
from enum import Enum
from types import SimpleNamespace
from typing import Dict, Iterable, Optional

from ...core import config
from ...core.exceptions import NotFoundError, ValidationError
from ..database_service import DatabaseService
from .calendar import expansion_window, occurrence_dates, occurs_on

logger = logging.getLogger(__name__)

_UNSET = object()

INSTANCE_FIELDS = ("name", "teacher_id", "location_id", "start_time", "end_time")
SCHEDULE_FIELDS = ("is_recurring", "day_of_week", "start_date", "end_date", "date")
REQUIRED_FIELDS = ("name", "teacher_id", "start_time", "end_time", "is_recurring")


class Scope(str, Enum):
    SINGLE = "single"
    FUTURE = "future"
    ALL = "all"


@dataclass
class ClassChanges:
    """
    Field changes to apply to a class or its instances. A field left at its
    default is unchanged; an explicit `None` clears a nullable field such as
    `location_id`.
    """
    name: Optional[str] = _UNSET
    teacher_id: Optional[str] = _UNSET
    location_id: Optional[str] = _UNSET
    start_time: Optional[datetime.time] = _UNSET
    end_time: Optional[datetime.time] = _UNSET
    is_recurring: Optional[bool] = _UNSET
    day_of_week: Optional[int] = _UNSET
    start_date: Optional[datetime.date] = _UNSET
    end_date: Optional[datetime.date] = _UNSET
    date: Optional[datetime.date] = _UNSET

    @classmethod
    def from_model(cls, model) -> "ClassChanges":
        """Takes only the fields the client actually sent."""
        names = {f.name for f in fields(cls)}
        return cls(**model.model_dump(include=names, exclude_unset=True))

    def as_dict(self) -> Dict:
        changes = {f.name: getattr(self, f.name) for f in fields(self)}
        return {key: value for key, value in changes.items() if value is not _UNSET}

    def instance_changes(self) -> Dict:
        return {key: value for key, value in self.as_dict().items() if key in INSTANCE_FIELDS}

    def schedule_changes(self) -> Dict:
        return {key: value for key, value in self.as_dict().items() if key in SCHEDULE_FIELDS}

    def check_required(self) -> None:
        cleared = [key for key, value in self.as_dict().items() if key in REQUIRED_FIELDS and value is None]
        if cleared:
            raise ValidationError(f"These fields cannot be cleared: {', '.join(cleared)}.")


@dataclass(frozen=True)
class ScopeResult:
    scope: Scope
    affected: int


def resolve_scope(class_, requested: Optional[Scope]) -> Scope:
    """
    One-off classes skip scope selection and are always `single`. Recurring
    classes must come with an explicit scope.
    """
    if not class_.is_recurring:
        return Scope.SINGLE
    if requested is None:
        raise ValidationError(
            "Please choose whether to change only this class, this and future classes, or all classes."
        )
    return Scope(requested)


def _check_anchor_date(db: DatabaseService, class_, target_date: date) -> None:
    if not occurs_on(class_, target_date):
        raise ValidationError(f"Class '{class_.name}' does not take place on {target_date.isoformat()}.")
    # Open-ended series are only materialized up to a horizon; extend it so
    # the anchor occurrence has a row to act on.
    db.ensure_class_materialized(class_.id, target_date)
    if db.get_class_instance(class_.id, target_date) is None:
        raise NotFoundError(f"Class '{class_.name}' on {target_date.isoformat()} has already been cancelled.")


def check_times(rows: Iterable, changes: Dict) -> None:
    """Every row must still start before it ends once `changes` is applied."""
    if "start_time" not in changes and "end_time" not in changes:
        return
    for row in rows:
        start = changes.get("start_time", row.start_time)
        end = changes.get("end_time", row.end_time)
        if start >= end:
            raise ValidationError("End time must be after start time.")


def _rows_touched(db: DatabaseService, class_, target_date: date, scope: Scope) -> list:
    """The template and instance rows an edit with `scope` rewrites."""
    instances = list(db.get_instances_for_class(class_.id))
    if class_.is_recurring and scope is Scope.SINGLE:
        return [i for i in instances if i.date == target_date]
    if class_.is_recurring and scope is Scope.FUTURE:
        return [class_] + [i for i in instances if i.date >= target_date]
    return [class_] + instances


def _next_schedule(class_, schedule: Dict, target_date: date) -> Dict:
    """
    Merges `schedule` over the template's current schedule and normalises it
    the way a new class is: a recurring class has a weekday and a start date
    and no single date, a one-off class only a date.
    """
    merged = {key: getattr(class_, key) for key in SCHEDULE_FIELDS}
    merged.update(schedule)
    if merged["is_recurring"]:
        if merged["day_of_week"] is None:
            raise ValidationError("A recurring class needs a day of the week.")
        merged["date"] = None
        merged["start_date"] = merged["start_date"] or target_date
        if merged["end_date"] is not None and merged["end_date"] < merged["start_date"]:
            raise ValidationError("End date cannot be before start date.")
    else:
        if merged["date"] is None:
            raise ValidationError("A one-off class needs a date.")
        merged.update(day_of_week=None, start_date=None, end_date=None)

    window_start, window_end = expansion_window(SimpleNamespace(**merged), config.RECURRENCE_HORIZON_WEEKS)
    if not occurrence_dates(SimpleNamespace(**merged), window_start, window_end):
        raise ValidationError("This schedule has no occurrences between its start and end dates.")
    return merged


def apply_edit(
    db: DatabaseService,
    class_,
    target_date: date,
    requested: Optional[Scope],
    changes: ClassChanges,
) -> ScopeResult:
    """
    Applies `changes` to the occurrence of `class_` on `target_date` and,
    depending on scope, to later or all occurrences.
    """
    if not changes.as_dict():
        raise ValidationError("No update data provided.")
    changes.check_required()
    scope = resolve_scope(class_, requested)
    update = changes.instance_changes()
    schedule = changes.schedule_changes()
    if schedule and class_.is_recurring and scope is not Scope.ALL:
        raise ValidationError("The schedule of a recurring class can only be changed for all classes.")
    _check_anchor_date(db, class_, target_date)
    check_times(_rows_touched(db, class_, target_date, scope), update)

    if schedule:
        new_schedule = _next_schedule(class_, schedule, target_date)
        affected = db.reschedule_class(class_.id, {**update, **new_schedule}, config.RECURRENCE_HORIZON_WEEKS)
    elif not class_.is_recurring:
        # A one-off template and its single instance describe the same
        # occurrence, so both are rewritten together.
        affected = db.modify_all_class_instances(class_.id, update)
    elif scope is Scope.SINGLE:
        affected = db.modify_class_instance(class_.id, target_date, update)
    elif scope is Scope.FUTURE:
        affected = db.modify_future_class_instances(class_.id, target_date, update)
    elif scope is Scope.ALL:
        affected = db.modify_all_class_instances(class_.id, update)
    else:
        raise ValueError(f"Unhandled scope: {scope!r}")

    logger.info("Edited class %s from %s with scope %s (%d instance rows)", class_.id, target_date, scope.value, affected)
    return ScopeResult(scope=scope, affected=affected)


def apply_delete(
    db: DatabaseService,
    class_,
    target_date: date,
    requested: Optional[Scope],
) -> ScopeResult:
    """
    Deletes the occurrence of `class_` on `target_date` and, depending on
    scope, later or all occurrences. Scope `all` removes the template too.
    """
    scope = resolve_scope(class_, requested)
    _check_anchor_date(db, class_, target_date)

    if not class_.is_recurring or scope is Scope.ALL:
        affected = db.delete_class(class_.id)
    elif scope is Scope.SINGLE:
        affected = db.delete_class_instance(class_.id, target_date)
    elif scope is Scope.FUTURE:
        affected = db.delete_future_class_instances(class_.id, target_date)
    else:
        raise ValueError(f"Unhandled scope: {scope!r}")

    logger.info("Deleted class %s from %s with scope %s (%d instance rows)", class_.id, target_date, scope.value, affected)
    return ScopeResult(scope=scope, affected=affected)
