# /studioalign/routers/auth_router.py

"""
Authentication endpoints: sign-up (`/register`), sign-in (`/token`), the
current user's profile (`/me`) and sign-out (`/sign-out`).

Tokens are stateless JWTs, so sign-out only releases what the server holds
for the user (its cached reference data); the client discards the token.
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm

# --- Application-specific Imports ---
from ..core import security
from ..core.deps import get_current_user
from ..core.exceptions import StudioAlignError, to_http_exception
from ..models.auth_model import Token, UserCreate, UserProfile
from ..services import user_service
from ..services.database_service import DatabaseService, get_db_service
from ..services.reference_cache import reference_cache
from ..services.user_service import CurrentUser

# --- Router Initialization ---
router = APIRouter()


@router.post("/register", response_model=UserProfile, status_code=status.HTTP_201_CREATED)
def register_user(user_in: UserCreate, db: DatabaseService = Depends(get_db_service)):
    """
    Creates the account and its role row. The router only translates the
    service's business errors into HTTP responses.
    """
    try:
        user = user_service.sign_up(db=db, user_in=user_in)
        return user_service.build_profile(user_service.resolve_current_user(db, user))
    except StudioAlignError as e:
        raise to_http_exception(e)


@router.post("/token", response_model=Token)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: DatabaseService = Depends(get_db_service),
):
    """OAuth2 password flow; the form's `username` field carries the email."""
    user = user_service.authenticate(db, email=form_data.username, password=form_data.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        # Reject accounts without a role before handing out a token.
        user_service.resolve_current_user(db, user)
    except StudioAlignError as e:
        raise to_http_exception(e)
    return Token(access_token=security.create_access_token(subject=user.id))


@router.get("/me", response_model=UserProfile)
def read_users_me(current_user: CurrentUser = Depends(get_current_user)):
    return user_service.build_profile(current_user)


@router.post("/sign-out", status_code=status.HTTP_204_NO_CONTENT)
def sign_out(current_user: CurrentUser = Depends(get_current_user)):
    reference_cache.drop(current_user.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
