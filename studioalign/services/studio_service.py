# /studioalign/services/studio_service.py

"""
Studio information and the reference data (teachers, locations, students)
that the class screens use to show names next to ids.

Reference data is read once per user and studio and then served from
`reference_cache` until a mutation on that studio invalidates it or the user
signs out.
"""

import logging
from dataclasses import dataclass
from typing import List

from ..core.exceptions import NotFoundError, ValidationError
from ..models import studio_model
from .database_service import DatabaseService
from .reference_cache import ReferenceData, reference_cache
from .user_service import CurrentUser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StudioContext:
    """The studio a request acts on, together with the caller."""
    user: CurrentUser
    studio_id: str


def _student_row(student) -> studio_model.StudentWithParent:
    return studio_model.StudentWithParent(
        id=student.id,
        name=student.name,
        date_of_birth=student.date_of_birth,
        parent_id=student.parent_id,
        parent_name=student.parent.name if student.parent else None,
        parent_email=student.parent.email if student.parent else None,
    )


def get_reference_data(ctx: StudioContext, db: DatabaseService) -> ReferenceData:
    cached = reference_cache.get(ctx.user.user_id, ctx.studio_id)
    if cached is not None:
        return cached
    data = ReferenceData(
        teachers=[studio_model.Teacher.model_validate(t) for t in db.get_teachers(ctx.studio_id)],
        locations=[studio_model.Location.model_validate(loc) for loc in db.get_locations(ctx.studio_id)],
        students=[_student_row(s) for s in db.get_students(ctx.studio_id)],
    )
    reference_cache.put(ctx.user.user_id, ctx.studio_id, data)
    return data


# --- Studio Info ---

def get_studio(ctx: StudioContext, db: DatabaseService):
    studio = db.get_studio_by_id(ctx.studio_id)
    if studio is None:
        raise NotFoundError(f"Studio with ID {ctx.studio_id} not found.")
    return studio


def update_studio(ctx: StudioContext, studio_update: studio_model.StudioUpdate, db: DatabaseService):
    update_data = studio_update.model_dump(exclude_unset=True)
    if not update_data:
        raise ValidationError("No update data provided.")
    studio = db.update_studio(ctx.studio_id, update_data)
    if studio is None:
        raise NotFoundError(f"Studio with ID {ctx.studio_id} not found.")
    return studio


def list_public_studios(db: DatabaseService) -> List:
    return db.get_all_studios()


# --- Locations ---

def list_locations(ctx: StudioContext, db: DatabaseService):
    return get_reference_data(ctx, db).locations


def add_location(ctx: StudioContext, location_in: studio_model.LocationCreate, db: DatabaseService):
    location = db.add_location({"studio_id": ctx.studio_id, **location_in.model_dump()})
    reference_cache.invalidate(ctx.studio_id)
    return location


def delete_location(ctx: StudioContext, location_id: str, db: DatabaseService) -> None:
    if not db.delete_location(location_id, ctx.studio_id):
        raise NotFoundError(f"Location with ID {location_id} not found.")
    reference_cache.invalidate(ctx.studio_id)


# --- People ---

def list_teachers(ctx: StudioContext, db: DatabaseService):
    return get_reference_data(ctx, db).teachers


def list_students(ctx: StudioContext, db: DatabaseService):
    return get_reference_data(ctx, db).students


def list_my_students(ctx: StudioContext, db: DatabaseService):
    return db.get_students_for_parent(ctx.user.profile_id)


def add_my_student(ctx: StudioContext, student_in: studio_model.StudentCreate, db: DatabaseService):
    student = db.add_student({
        "studio_id": ctx.studio_id,
        "parent_id": ctx.user.profile_id,
        **student_in.model_dump(),
    })
    reference_cache.invalidate(ctx.studio_id)
    logger.info("Parent %s added student %s", ctx.user.profile_id, student.id)
    return student
