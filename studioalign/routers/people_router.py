# /studioalign/routers/people_router.py

"""
The people of a studio: teachers and students for the owner, and a parent's
own children under `/my-students`. Mounted once per prefix in `main`.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from ..core.deps import studio_context_for
from ..core.roles import Role
from ..models import studio_model
from ..services import studio_service
from ..services.database_service import DatabaseService, get_db_service
from ..services.studio_service import StudioContext

teachers_router = APIRouter()
students_router = APIRouter()
my_students_router = APIRouter()


@teachers_router.get("", response_model=List[studio_model.Teacher], summary="List Teachers")
def list_teachers(
    ctx: StudioContext = Depends(studio_context_for(Role.OWNER)),
    db: DatabaseService = Depends(get_db_service),
):
    return studio_service.list_teachers(ctx, db)


@students_router.get("", response_model=List[studio_model.StudentWithParent], summary="List Students with Parents")
def list_students(
    ctx: StudioContext = Depends(studio_context_for(Role.OWNER)),
    db: DatabaseService = Depends(get_db_service),
):
    return studio_service.list_students(ctx, db)


@my_students_router.get("", response_model=List[studio_model.Student], summary="List My Children")
def list_my_students(
    ctx: StudioContext = Depends(studio_context_for(Role.PARENT)),
    db: DatabaseService = Depends(get_db_service),
):
    return studio_service.list_my_students(ctx, db)


@my_students_router.post("", response_model=studio_model.Student, status_code=status.HTTP_201_CREATED, summary="Add a Child")
def add_my_student(
    student_in: studio_model.StudentCreate,
    ctx: StudioContext = Depends(studio_context_for(Role.PARENT)),
    db: DatabaseService = Depends(get_db_service),
):
    return studio_service.add_my_student(ctx, student_in, db)
