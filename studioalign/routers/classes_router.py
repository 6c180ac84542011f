# /studioalign/routers/classes_router.py

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse

from ..core.deps import get_studio_context, studio_context_for
from ..core.exceptions import StudioAlignError, to_http_exception
from ..core.roles import Role
from ..models import attendance_model, class_model, studio_model
from ..services import attendance_service, class_service
from ..services.class_helpers.scope import Scope
from ..services.database_service import DatabaseService, get_db_service
from ..services.studio_service import StudioContext

router = APIRouter()

owner_context = studio_context_for(Role.OWNER)
staff_context = studio_context_for(Role.OWNER, Role.TEACHER)


def _csv_response(csv_string: str, file_name: str) -> StreamingResponse:
    return StreamingResponse(
        iter([csv_string]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={file_name}"},
    )

# --- CLASS COLLECTION ENDPOINTS (/api/classes) ---

@router.get("", response_model=List[class_model.ClassListItem], summary="List Classes for the Current Role")
def list_classes(ctx: StudioContext = Depends(get_studio_context), db: DatabaseService = Depends(get_db_service)):
    return class_service.list_classes(ctx, db)


@router.post("", response_model=class_model.Class, status_code=status.HTTP_201_CREATED, summary="Create a Class")
def create_class(
    class_in: class_model.ClassCreate,
    ctx: StudioContext = Depends(owner_context),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        return class_service.create_class(ctx, class_in, db)
    except StudioAlignError as e:
        raise to_http_exception(e)


@router.get("/week", response_model=class_model.WeekCalendar, summary="Get the Weekly Calendar")
def get_week(
    week_of: Optional[date] = Query(default=None, description="Any date in the wanted week; defaults to today."),
    ctx: StudioContext = Depends(get_studio_context),
    db: DatabaseService = Depends(get_db_service),
):
    return class_service.get_week_calendar(ctx, week_of or date.today(), db)

# --- ATTENDANCE ENDPOINTS (/api/classes/instances/{instance_id}) ---

@router.get("/instances/{instance_id}/attendance", response_model=attendance_model.AttendanceSheet, summary="Get an Attendance Sheet")
def get_attendance(
    instance_id: str,
    ctx: StudioContext = Depends(get_studio_context),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        return attendance_service.get_attendance_sheet(ctx, instance_id, db)
    except StudioAlignError as e:
        raise to_http_exception(e)


@router.put("/instances/{instance_id}/attendance", response_model=attendance_model.AttendanceSaveResult, summary="Save Attendance")
def save_attendance(
    instance_id: str,
    attendance_in: attendance_model.AttendanceSave,
    ctx: StudioContext = Depends(staff_context),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        saved = attendance_service.save_attendance(ctx, instance_id, attendance_in.records, db)
        return attendance_model.AttendanceSaveResult(saved=saved)
    except StudioAlignError as e:
        raise to_http_exception(e)


@router.get("/instances/{instance_id}/attendance/export", summary="Export Attendance as CSV", response_class=StreamingResponse)
def export_attendance(
    instance_id: str,
    ctx: StudioContext = Depends(staff_context),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        csv_string = attendance_service.export_attendance_as_csv(ctx, instance_id, db)
    except StudioAlignError as e:
        raise to_http_exception(e)
    return _csv_response(csv_string, f"attendance_{instance_id}.csv")

# --- INDIVIDUAL CLASS RESOURCE ENDPOINTS (/api/classes/{class_id}) ---

@router.get("/{class_id}", response_model=class_model.Class, summary="Get a Single Class")
def get_class(class_id: str, ctx: StudioContext = Depends(get_studio_context), db: DatabaseService = Depends(get_db_service)):
    try:
        return class_service.get_class(ctx, class_id, db)
    except StudioAlignError as e:
        raise to_http_exception(e)


@router.patch("/{class_id}", response_model=class_model.ScopeResult, summary="Edit a Class Occurrence with Scope")
def edit_class(
    class_id: str,
    edit: class_model.ClassEdit,
    ctx: StudioContext = Depends(owner_context),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        return class_service.edit_class(ctx, class_id, edit, db)
    except StudioAlignError as e:
        raise to_http_exception(e)


@router.delete("/{class_id}", response_model=class_model.ScopeResult, summary="Delete a Class Occurrence with Scope")
def delete_class(
    class_id: str,
    on_date: date = Query(..., alias="date", description="Date of the occurrence the delete starts from."),
    scope: Optional[Scope] = Query(default=None),
    ctx: StudioContext = Depends(owner_context),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        return class_service.delete_class_occurrence(ctx, class_id, on_date, scope, db)
    except StudioAlignError as e:
        raise to_http_exception(e)


@router.get("/{class_id}/export", summary="Export Class Roster as CSV", response_class=StreamingResponse)
def export_class_roster_csv(
    class_id: str,
    ctx: StudioContext = Depends(staff_context),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        csv_string = class_service.export_roster_as_csv(ctx, class_id, db)
        class_name = class_service.get_class(ctx, class_id, db).name
    except StudioAlignError as e:
        raise to_http_exception(e)
    return _csv_response(csv_string, f"roster_{class_name.replace(' ', '_').lower()}.csv")

# --- INSTANCE SUB-RESOURCE ENDPOINTS ---

@router.get("/{class_id}/instances", response_model=List[class_model.ClassInstance], summary="List a Class's Instances")
def list_instances(class_id: str, ctx: StudioContext = Depends(get_studio_context), db: DatabaseService = Depends(get_db_service)):
    try:
        return class_service.get_class_instances(ctx, class_id, db)
    except StudioAlignError as e:
        raise to_http_exception(e)


@router.post("/{class_id}/instances", response_model=class_model.ClassInstance, summary="Get or Create the Instance on a Date")
def get_or_create_instance(
    class_id: str,
    on_date: date = Query(..., alias="date"),
    ctx: StudioContext = Depends(staff_context),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        return attendance_service.get_or_create_class_instance(ctx, class_id, on_date, db)
    except StudioAlignError as e:
        raise to_http_exception(e)


@router.patch("/{class_id}/instances", response_model=class_model.BulkUpdateResult, summary="Bulk Update Instances")
def bulk_update_instances(
    class_id: str,
    bulk: class_model.BulkInstanceUpdate,
    ctx: StudioContext = Depends(owner_context),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        affected = class_service.bulk_update_instances(ctx, class_id, bulk, db)
        return class_model.BulkUpdateResult(affected=affected)
    except StudioAlignError as e:
        raise to_http_exception(e)

# --- ROSTER SUB-RESOURCE ENDPOINTS ---

@router.get("/{class_id}/students", response_model=List[studio_model.Student], summary="Get a Class Roster")
def get_roster(class_id: str, ctx: StudioContext = Depends(staff_context), db: DatabaseService = Depends(get_db_service)):
    try:
        return class_service.get_roster(ctx, class_id, db)
    except StudioAlignError as e:
        raise to_http_exception(e)


@router.put("/{class_id}/students", response_model=List[studio_model.Student], summary="Replace a Class Roster")
def replace_roster(
    class_id: str,
    roster: class_model.RosterUpdate,
    ctx: StudioContext = Depends(owner_context),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        return class_service.replace_roster(ctx, class_id, roster.student_ids, db)
    except StudioAlignError as e:
        raise to_http_exception(e)
