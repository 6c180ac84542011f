# /studioalign/core/config.py

"""
Runtime configuration for the StudioAlign backend.

Every setting is read from the environment once at import time. A local
`.env` file is loaded first so that development machines do not need to
export variables by hand; on the hosting platform the variables are set
directly.
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _normalise_database_url(url: str) -> str:
    # Some hosts still hand out the legacy `postgres://` scheme, which
    # SQLAlchemy no longer accepts.
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


DATABASE_URL = _normalise_database_url(os.getenv("DATABASE_URL", "sqlite:///./studioalign.db"))

# --- Authentication ---
SECRET_KEY = os.getenv("SECRET_KEY", "change-this-secret-in-prod")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "720"))

# --- Scheduling ---
# Recurring classes without an end date are expanded this many weeks ahead.
RECURRENCE_HORIZON_WEEKS = int(os.getenv("RECURRENCE_HORIZON_WEEKS", "26"))

# --- Studio defaults ---
DEFAULT_STUDIO_NAME = os.getenv("DEFAULT_STUDIO_NAME", "My Dance Studio")

# --- HTTP ---
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
