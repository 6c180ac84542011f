# /studioalign/routers/studio_router.py

from typing import List

from fastapi import APIRouter, Depends, Response, status

from ..core.deps import studio_context_for
from ..core.exceptions import StudioAlignError, to_http_exception
from ..core.roles import Role
from ..models import studio_model
from ..services import studio_service
from ..services.database_service import DatabaseService, get_db_service
from ..services.studio_service import StudioContext

router = APIRouter()

owner_context = studio_context_for(Role.OWNER)

# --- STUDIO INFO ENDPOINTS (/api/studio) ---

@router.get("", response_model=studio_model.Studio, summary="Get Studio Info")
def get_studio(ctx: StudioContext = Depends(owner_context), db: DatabaseService = Depends(get_db_service)):
    try:
        return studio_service.get_studio(ctx, db)
    except StudioAlignError as e:
        raise to_http_exception(e)


@router.put("", response_model=studio_model.Studio, summary="Update Studio Info")
def update_studio(
    studio_update: studio_model.StudioUpdate,
    ctx: StudioContext = Depends(owner_context),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        return studio_service.update_studio(ctx, studio_update, db)
    except StudioAlignError as e:
        raise to_http_exception(e)

# --- LOCATION SUB-RESOURCE ENDPOINTS ---

@router.get("/locations", response_model=List[studio_model.Location], summary="List Locations")
def list_locations(ctx: StudioContext = Depends(owner_context), db: DatabaseService = Depends(get_db_service)):
    return studio_service.list_locations(ctx, db)


@router.post("/locations", response_model=studio_model.Location, status_code=status.HTTP_201_CREATED, summary="Add a Location")
def add_location(
    location_in: studio_model.LocationCreate,
    ctx: StudioContext = Depends(owner_context),
    db: DatabaseService = Depends(get_db_service),
):
    return studio_service.add_location(ctx, location_in, db)


@router.delete("/locations/{location_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a Location")
def delete_location(
    location_id: str,
    ctx: StudioContext = Depends(owner_context),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        studio_service.delete_location(ctx, location_id, db)
    except StudioAlignError as e:
        raise to_http_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
