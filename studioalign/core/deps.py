# /studioalign/core/deps.py

"""
FastAPI dependencies that turn a bearer token into the explicit context
objects (`CurrentUser`, `StudioContext`) the services take.
"""

from typing import Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from . import security
from .exceptions import PermissionDeniedError
from .roles import Role
from ..services.database_service import DatabaseService, get_db_service
from ..services.studio_service import StudioContext
from ..services.user_service import CurrentUser, resolve_current_user

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token")

credentials_exception = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)


def current_user_from_token(token: str, db: DatabaseService) -> CurrentUser:
    """Shared by the HTTP dependency and the WebSocket handshake."""
    user_id = security.decode_access_token(token)
    if user_id is None:
        raise credentials_exception
    user = db.get_user_by_id(user_id)
    if user is None:
        raise credentials_exception
    try:
        return resolve_current_user(db, user)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: DatabaseService = Depends(get_db_service),
) -> CurrentUser:
    return current_user_from_token(token, db)


def require_roles(*roles: Role) -> Callable[..., CurrentUser]:
    """Dependency factory that lets only `roles` through."""
    def checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have access to this section.",
            )
        return current_user
    return checker


def get_studio_context(current_user: CurrentUser = Depends(get_current_user)) -> StudioContext:
    return StudioContext(user=current_user, studio_id=current_user.studio_id)


def studio_context_for(*roles: Role) -> Callable[..., StudioContext]:
    """Like `get_studio_context`, restricted to `roles`."""
    def provider(current_user: CurrentUser = Depends(require_roles(*roles))) -> StudioContext:
        return StudioContext(user=current_user, studio_id=current_user.studio_id)
    return provider
