# /studioalign/services/database_helpers/channel_repository_sql.py

from typing import Dict, List, Optional

from ...db.models.channel_models import ClassChannel, ChannelPost
from ...db.models.class_models import Class
from .base_repository_sql import BaseRepositorySQL


class ChannelRepositorySQL(BaseRepositorySQL):

    def get_channels_for_studio(self, studio_id: str, class_ids: Optional[List[str]] = None) -> List[ClassChannel]:
        query = (
            self.db.query(ClassChannel)
            .join(Class, ClassChannel.class_id == Class.id)
            .filter(Class.studio_id == studio_id)
        )
        if class_ids is not None:
            query = query.filter(ClassChannel.class_id.in_(class_ids))
        return query.order_by(ClassChannel.name).all()

    def get_channel_by_id(self, channel_id: str, studio_id: str) -> Optional[ClassChannel]:
        return (
            self.db.query(ClassChannel)
            .join(Class, ClassChannel.class_id == Class.id)
            .filter(ClassChannel.id == channel_id, Class.studio_id == studio_id)
            .first()
        )

    def add_channel(self, record: Dict) -> ClassChannel:
        channel = ClassChannel(**record)
        with self.transaction():
            self.db.add(channel)
        self.db.refresh(channel)
        return channel

    def get_posts(self, channel_id: str) -> List[ChannelPost]:
        return (
            self.db.query(ChannelPost)
            .filter(ChannelPost.channel_id == channel_id)
            .order_by(ChannelPost.created_at.desc())
            .all()
        )

    def add_post(self, record: Dict) -> ChannelPost:
        post = ChannelPost(**record)
        with self.transaction():
            self.db.add(post)
        self.db.refresh(post)
        return post
