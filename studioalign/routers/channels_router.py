# /studioalign/routers/channels_router.py

from typing import List

from fastapi import APIRouter, Depends, status

from ..core.deps import get_studio_context, studio_context_for
from ..core.exceptions import StudioAlignError, to_http_exception
from ..core.roles import Role
from ..models import channel_model
from ..services import channel_service
from ..services.database_service import DatabaseService, get_db_service
from ..services.studio_service import StudioContext

router = APIRouter()


@router.get("", response_model=List[channel_model.Channel], summary="List Visible Class Channels")
def list_channels(ctx: StudioContext = Depends(get_studio_context), db: DatabaseService = Depends(get_db_service)):
    return channel_service.list_channels(ctx, db)


@router.post("", response_model=channel_model.Channel, status_code=status.HTTP_201_CREATED, summary="Create a Class Channel")
def create_channel(
    channel_in: channel_model.ChannelCreate,
    ctx: StudioContext = Depends(studio_context_for(Role.OWNER)),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        return channel_service.create_channel(ctx, channel_in, db)
    except StudioAlignError as e:
        raise to_http_exception(e)


@router.get("/{channel_id}/posts", response_model=List[channel_model.Post], summary="List Channel Posts")
def list_posts(channel_id: str, ctx: StudioContext = Depends(get_studio_context), db: DatabaseService = Depends(get_db_service)):
    try:
        return channel_service.list_posts(ctx, channel_id, db)
    except StudioAlignError as e:
        raise to_http_exception(e)


@router.post("/{channel_id}/posts", response_model=channel_model.Post, status_code=status.HTTP_201_CREATED, summary="Post to a Channel")
def add_post(
    channel_id: str,
    post_in: channel_model.PostCreate,
    ctx: StudioContext = Depends(get_studio_context),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        return channel_service.add_post(ctx, channel_id, post_in, db)
    except StudioAlignError as e:
        raise to_http_exception(e)
