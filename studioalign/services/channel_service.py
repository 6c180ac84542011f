# /studioalign/services/channel_service.py

"""
Class channels: a noticeboard per class where the studio posts updates.

Owners create channels and see all of them. Teachers see the channels of
the classes they teach, parents those of classes their children attend.
"""

import logging
from typing import List, Optional

from ..core.exceptions import NotFoundError, ValidationError
from ..core.roles import Role
from ..models import channel_model
from .database_service import DatabaseService
from .studio_service import StudioContext

logger = logging.getLogger(__name__)


def _visible_class_ids(ctx: StudioContext, db: DatabaseService) -> Optional[List[str]]:
    """None means every class of the studio."""
    role = ctx.user.role
    if role is Role.OWNER:
        return None
    if role is Role.TEACHER:
        return [c.id for c in db.get_classes_for_studio(ctx.studio_id, teacher_id=ctx.user.profile_id)]
    if role is Role.PARENT:
        class_ids = [c.id for c in db.get_classes_for_studio(ctx.studio_id)]
        return list(db.get_roster_for_parent(class_ids, ctx.user.profile_id).keys())
    raise ValueError(f"Unhandled role: {role!r}")


def list_channels(ctx: StudioContext, db: DatabaseService):
    return db.get_channels_for_studio(ctx.studio_id, class_ids=_visible_class_ids(ctx, db))


def _get_visible_channel(ctx: StudioContext, channel_id: str, db: DatabaseService):
    channel = db.get_channel_by_id(channel_id, ctx.studio_id)
    visible = _visible_class_ids(ctx, db)
    if channel is None or (visible is not None and channel.class_id not in visible):
        raise NotFoundError(f"Channel with ID {channel_id} not found.")
    return channel


def create_channel(ctx: StudioContext, channel_in: channel_model.ChannelCreate, db: DatabaseService):
    if db.get_class_by_id(channel_in.class_id, ctx.studio_id) is None:
        raise ValidationError(f"Class with ID {channel_in.class_id} is not part of this studio.")
    channel = db.add_channel({"created_by": ctx.user.user_id, **channel_in.model_dump()})
    logger.info("Created channel %s for class %s", channel.id, channel.class_id)
    return channel


def list_posts(ctx: StudioContext, channel_id: str, db: DatabaseService):
    _get_visible_channel(ctx, channel_id, db)
    return db.get_channel_posts(channel_id)


def add_post(ctx: StudioContext, channel_id: str, post_in: channel_model.PostCreate, db: DatabaseService):
    _get_visible_channel(ctx, channel_id, db)
    if not post_in.content.strip():
        raise ValidationError("Post content cannot be empty.")
    return db.add_channel_post({"channel_id": channel_id, "author_id": ctx.user.user_id, "content": post_in.content})
