# /studioalign/db/base_class.py

import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base

# Every ORM model in the project inherits from this Base.
Base = declarative_base()


def generate_id(prefix: str) -> str:
    """Builds a short, prefixed primary key such as `cls_3f9a1c2b7d4e`."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def utcnow() -> datetime:
    # Python-side timestamps keep microsecond ordering on SQLite, whose
    # CURRENT_TIMESTAMP only resolves to the second.
    return datetime.now(timezone.utc)
