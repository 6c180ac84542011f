# /studioalign/models/messaging_model.py

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict


class ConversationCreate(BaseModel):
    participant_ids: List[str] = Field(..., min_length=1, description="User ids to talk to. The creator is added automatically.")


class ConversationCreated(BaseModel):
    id: str


class Participant(BaseModel):
    user_id: str
    email: Optional[str] = None
    unread_count: int = 0


class ConversationSummary(BaseModel):
    """A conversation as shown in the user's list, with their own unread count."""
    id: str
    last_message: Optional[str] = None
    last_message_at: Optional[datetime] = None
    unread_count: int = 0
    participants: List[Participant] = Field(default_factory=list)


class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1)


class Message(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    conversation_id: str
    sender_id: Optional[str] = None
    content: str
    created_at: datetime
    edited_at: Optional[datetime] = None
    is_deleted: bool = False
