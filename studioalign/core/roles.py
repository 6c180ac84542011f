# /studioalign/core/roles.py

"""
The closed set of user roles and the dashboard sections each one may open.

Role dispatch anywhere in the code base goes through `Role` members. Adding a
role means adding a member here and a branch in every `for_role` style
function; those functions raise on an unhandled member so a forgotten branch
fails loudly instead of silently falling through to another role's behaviour.
"""

from enum import Enum
from typing import Dict, List


class Role(str, Enum):
    OWNER = "owner"
    TEACHER = "teacher"
    PARENT = "parent"


class Section(str, Enum):
    OVERVIEW = "overview"
    CLASSES = "classes"
    MESSAGES = "messages"
    CHANNELS = "channels"
    STUDIO = "studio"
    TEACHERS = "teachers"
    STUDENTS = "students"
    MY_STUDENTS = "my-students"
    PAYMENTS = "payments"
    INVOICES = "invoices"


# Display name and client path for each section.
SECTION_LINKS: Dict[Section, Dict[str, str]] = {
    Section.OVERVIEW: {"name": "Overview", "to": "/dashboard"},
    Section.CLASSES: {"name": "Classes", "to": "/dashboard/classes"},
    Section.MESSAGES: {"name": "Messages", "to": "/dashboard/messages"},
    Section.CHANNELS: {"name": "Channels", "to": "/dashboard/channels"},
    Section.STUDIO: {"name": "Studio Info", "to": "/dashboard/studio"},
    Section.TEACHERS: {"name": "Teachers", "to": "/dashboard/teachers"},
    Section.STUDENTS: {"name": "Students", "to": "/dashboard/students"},
    Section.MY_STUDENTS: {"name": "My Students", "to": "/dashboard/my-students"},
    Section.PAYMENTS: {"name": "Payments", "to": "/dashboard/payments"},
    Section.INVOICES: {"name": "Invoices", "to": "/dashboard/invoices"},
}

_SHARED_SECTIONS = [Section.OVERVIEW, Section.CLASSES, Section.MESSAGES, Section.CHANNELS]


def sections_for_role(role: Role) -> List[Section]:
    """Returns the ordered list of sections visible to `role`."""
    if role is Role.OWNER:
        return _SHARED_SECTIONS + [
            Section.STUDIO,
            Section.TEACHERS,
            Section.STUDENTS,
            Section.PAYMENTS,
            Section.INVOICES,
        ]
    if role is Role.TEACHER:
        return list(_SHARED_SECTIONS)
    if role is Role.PARENT:
        return _SHARED_SECTIONS + [Section.MY_STUDENTS]
    raise ValueError(f"Unhandled role: {role!r}")


def navigation_for_role(role: Role) -> List[Dict[str, str]]:
    return [{"section": s.value, **SECTION_LINKS[s]} for s in sections_for_role(role)]
