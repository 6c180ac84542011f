# /studioalign/services/user_service.py

"""
Business logic for accounts: sign-up, credential checks and resolving which
role a signed-in user plays.

A login (`users` row) carries no role of its own. The role is decided by
looking the user up in the owner, teacher and parent tables in that order;
the first table holding a row for the user wins. A user with no role row
cannot use the dashboard.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..core import config, security
from ..core.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from ..core.roles import Role, navigation_for_role
from ..db.models.user_models import Parent, Teacher, User
from ..models.auth_model import UserCreate, UserProfile
from .database_service import DatabaseService
from .reference_cache import reference_cache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrentUser:
    """The authenticated caller, passed explicitly to every service that needs it."""
    user_id: str
    email: str
    role: Role
    profile_id: str
    studio_id: str
    name: str


def sign_up(db: DatabaseService, user_in: UserCreate) -> User:
    """
    Creates a login plus the role row for `user_in.role`.

    Owners get a studio named after the configured default unless they
    already own one. Teachers and parents must name the studio they join.
    """
    email = user_in.email.lower()
    if db.get_user_by_email(email) is not None:
        raise ConflictError("An account with this email already exists.")

    user_record = {"email": email, "hashed_password": security.hash_password(user_in.password)}
    role = Role(user_in.role)

    if role is Role.OWNER:
        db.create_owner_account(
            user_record=user_record,
            owner_record={"name": user_in.name, "email": email},
            studio_record={"name": config.DEFAULT_STUDIO_NAME, "email": email},
        )
    elif role in (Role.TEACHER, Role.PARENT):
        if not user_in.studio_id:
            raise ValidationError("Please choose the studio you belong to.")
        if db.get_studio_by_id(user_in.studio_id) is None:
            raise NotFoundError(f"Studio with ID {user_in.studio_id} not found.")
        member_model = Teacher if role is Role.TEACHER else Parent
        db.create_member_account(
            user_record=user_record,
            member_model=member_model,
            member_record={"studio_id": user_in.studio_id, "name": user_in.name, "email": email},
        )
        reference_cache.invalidate(user_in.studio_id)
    else:
        raise ValueError(f"Unhandled role: {role!r}")

    logger.info("Signed up %s as %s", email, role.value)
    return db.get_user_by_email(email)


def authenticate(db: DatabaseService, email: str, password: str) -> Optional[User]:
    """Returns the user for a matching email/password pair, otherwise None."""
    user = db.get_user_by_email(email)
    if user is None or not security.verify_password(password, user.hashed_password):
        return None
    return user


def resolve_current_user(db: DatabaseService, user: User) -> CurrentUser:
    """Looks the user up as owner, then teacher, then parent."""
    owner = db.get_owner_by_user_id(user.id)
    if owner is not None:
        studio = db.get_studio_for_owner(owner.id)
        if studio is None:
            raise PermissionDeniedError("This owner account has no studio.")
        return CurrentUser(user.id, user.email, Role.OWNER, owner.id, studio.id, owner.name)

    teacher = db.get_teacher_by_user_id(user.id)
    if teacher is not None:
        return CurrentUser(user.id, user.email, Role.TEACHER, teacher.id, teacher.studio_id, teacher.name)

    parent = db.get_parent_by_user_id(user.id)
    if parent is not None:
        return CurrentUser(user.id, user.email, Role.PARENT, parent.id, parent.studio_id, parent.name)

    logger.warning("User %s has no owner, teacher or parent record", user.id)
    raise PermissionDeniedError("No role found for this account.")


def build_profile(current_user: CurrentUser) -> UserProfile:
    return UserProfile(
        id=current_user.user_id,
        email=current_user.email,
        name=current_user.name,
        role=current_user.role,
        profile_id=current_user.profile_id,
        studio_id=current_user.studio_id,
        navigation=navigation_for_role(current_user.role),
    )
