# /studioalign/models/auth_model.py

# --- Core Imports ---
from pydantic import BaseModel, Field, EmailStr, ConfigDict
from typing import Dict, List, Optional

from ..core.roles import Role

# --- Model Definitions ---

class UserCreate(BaseModel):
    """
    Sign-up payload. Owners get a studio created for them; teachers and
    parents join an existing studio chosen from the public list.
    """
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: str = Field(..., min_length=1)
    role: Role
    studio_id: Optional[str] = Field(default=None, description="Required for teacher and parent sign-ups.")


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserProfile(BaseModel):
    """The signed-in user as the dashboard sees them, with their navigation."""
    id: str
    email: str
    name: str
    role: Role
    profile_id: str
    studio_id: str
    navigation: List[Dict[str, str]] = Field(default_factory=list)


class StudioPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
