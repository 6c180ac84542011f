# /studioalign/models/dashboard_model.py

# --- Core Imports ---
from typing import Dict, List

from pydantic import BaseModel, Field

from ..core.roles import Role

# --- Model Definition ---

class NavigationItem(BaseModel):
    section: str
    name: str
    to: str


class DashboardOverview(BaseModel):
    """
    Data for the overview page: the counts each role's cards show plus the
    sections the role may navigate to.
    """
    role: Role
    class_count: int = Field(..., description="Classes the user can see.", examples=[4])
    student_count: int = Field(..., description="Students in the studio, or the parent's own children.", examples=[112])
    teacher_count: int = Field(default=0, examples=[6])
    classes_this_week: int = Field(default=0, description="Occurrences on the current Sunday-based week.")
    unread_messages: int = 0
    invoice_counts: Dict[str, int] = Field(default_factory=dict, description="Owner only: invoices per status.")
    navigation: List[NavigationItem] = Field(default_factory=list)
