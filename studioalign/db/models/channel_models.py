# /studioalign/db/models/channel_models.py

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..base_class import Base, generate_id, utcnow


class ClassChannel(Base):
    """An announcement feed attached to one class."""
    __tablename__ = "class_channels"

    id = Column(String, primary_key=True, index=True, default=lambda: generate_id("chn"))
    class_id = Column(String, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    created_by = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    class_ = relationship("Class", back_populates="channels")
    posts = relationship(
        "ChannelPost", back_populates="channel", cascade="all, delete-orphan",
        order_by="ChannelPost.created_at.desc()",
    )


class ChannelPost(Base):
    __tablename__ = "channel_posts"

    id = Column(String, primary_key=True, index=True, default=lambda: generate_id("pst"))
    channel_id = Column(String, ForeignKey("class_channels.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    content = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    channel = relationship("ClassChannel", back_populates="posts")
