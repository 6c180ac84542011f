# /studioalign/core/exceptions.py

"""
Domain exceptions raised by the service layer.

Services never raise `HTTPException` themselves. Routers catch these and
translate them into HTTP status codes, so the same business rules can be
exercised directly from tests or background tasks.
"""

from fastapi import HTTPException, status


class StudioAlignError(Exception):
    """Base class for every business-rule failure."""


class ValidationError(StudioAlignError):
    """Input was missing or inconsistent. Raised before any write happens."""


class NotFoundError(StudioAlignError):
    """The requested row does not exist or is not visible to the caller."""


class PermissionDeniedError(StudioAlignError):
    """The caller's role does not allow the requested action."""


class ConflictError(StudioAlignError):
    """The write would violate a uniqueness rule (e.g. a duplicate email)."""


def to_http_exception(error: StudioAlignError) -> HTTPException:
    """Maps a domain error onto the matching `HTTPException` for a router to raise."""
    if isinstance(error, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, PermissionDeniedError):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(error, ConflictError):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(error))
