# /studioalign/routers/public_router.py

from typing import List

from fastapi import APIRouter, Depends

from ..models.auth_model import StudioPublic
from ..services import studio_service
from ..services.database_service import DatabaseService, get_db_service

router = APIRouter()


@router.get("/studios", response_model=List[StudioPublic], summary="List Studios for the Sign-up Form")
def list_studios(db: DatabaseService = Depends(get_db_service)):
    """Unauthenticated: teachers and parents pick their studio from this list."""
    return studio_service.list_public_studios(db)
