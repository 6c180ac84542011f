# /studioalign/routers/dashboard_router.py

from fastapi import APIRouter, Depends

from ..core.deps import get_studio_context
from ..models.dashboard_model import DashboardOverview
from ..services import dashboard_service
from ..services.database_service import DatabaseService, get_db_service
from ..services.studio_service import StudioContext

router = APIRouter()


@router.get("/overview", response_model=DashboardOverview, summary="Get the Overview Cards and Navigation")
def get_dashboard_overview(ctx: StudioContext = Depends(get_studio_context), db: DatabaseService = Depends(get_db_service)):
    """The counts shown on the overview page plus the sections the caller may open."""
    return dashboard_service.get_overview(ctx, db)
