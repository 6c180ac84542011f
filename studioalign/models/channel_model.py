# /studioalign/models/channel_model.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict


class ChannelCreate(BaseModel):
    class_id: str
    name: str = Field(..., min_length=1)
    description: Optional[str] = None


class Channel(ChannelCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None


class PostCreate(BaseModel):
    content: str = Field(..., min_length=1)


class Post(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    channel_id: str
    author_id: Optional[str] = None
    content: str
    created_at: datetime
