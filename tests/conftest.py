# /tests/conftest.py

"""
Shared fixtures.

Service-level tests run against a private in-memory SQLite database (one
connection shared through `StaticPool`). API tests get a file-backed
database in `tmp_path` instead, because the WebSocket handler and the REST
handlers run on different threads and each needs its own connection.
"""

from datetime import date
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from studioalign.core import security
from studioalign.core.roles import Role
from studioalign.db import base  # noqa: F401
from studioalign.db.base_class import Base
from studioalign.db.database import enable_sqlite_foreign_keys, get_db
from studioalign.db.models.user_models import Parent, Teacher
from studioalign.services.database_service import DatabaseService
from studioalign.services.realtime import ChangeFeed, get_change_feed
from studioalign.services.reference_cache import reference_cache
from studioalign.services.studio_service import StudioContext
from studioalign.services.user_service import CurrentUser


def _make_engine(url: str, **kwargs):
    engine = create_engine(url, connect_args={"check_same_thread": False}, **kwargs)
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture(autouse=True)
def clear_reference_cache():
    reference_cache.clear()
    yield
    reference_cache.clear()


@pytest.fixture
def db_session():
    engine = _make_engine("sqlite://", poolclass=StaticPool)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def db_service(db_session):
    return DatabaseService(db_session=db_session)


@pytest.fixture
def feed():
    return ChangeFeed()


def seed_studio(db: DatabaseService) -> SimpleNamespace:
    """
    One studio with an owner, a teacher, two parents and three students.
    Passwords are hashed once per seed; every account uses "password123".
    """
    hashed = security.hash_password("password123")
    owner = db.create_owner_account(
        user_record={"email": "owner@studio.test", "hashed_password": hashed},
        owner_record={"name": "Olivia Owner", "email": "owner@studio.test"},
        studio_record={"name": "My Dance Studio", "email": "owner@studio.test"},
    )
    studio = db.get_studio_for_owner(owner.id)
    teacher = db.create_member_account(
        user_record={"email": "teacher@studio.test", "hashed_password": hashed},
        member_model=Teacher,
        member_record={"studio_id": studio.id, "name": "Theo Teacher", "email": "teacher@studio.test"},
    )
    parent = db.create_member_account(
        user_record={"email": "parent@studio.test", "hashed_password": hashed},
        member_model=Parent,
        member_record={"studio_id": studio.id, "name": "Pat Parent", "email": "parent@studio.test"},
    )
    other_parent = db.create_member_account(
        user_record={"email": "other@studio.test", "hashed_password": hashed},
        member_model=Parent,
        member_record={"studio_id": studio.id, "name": "Quinn Other", "email": "other@studio.test"},
    )
    location = db.add_location({"studio_id": studio.id, "name": "Studio A"})
    ava = db.add_student({"studio_id": studio.id, "parent_id": parent.id, "name": "Ava", "date_of_birth": date(2015, 4, 2)})
    ben = db.add_student({"studio_id": studio.id, "parent_id": parent.id, "name": "Ben"})
    cleo = db.add_student({"studio_id": studio.id, "parent_id": other_parent.id, "name": "Cleo"})

    def context(user_id, email, role, profile_id, name):
        return StudioContext(
            user=CurrentUser(user_id, email, role, profile_id, studio.id, name),
            studio_id=studio.id,
        )

    return SimpleNamespace(
        studio=studio,
        owner=owner,
        teacher=teacher,
        parent=parent,
        other_parent=other_parent,
        location=location,
        students=[ava, ben, cleo],
        owner_ctx=context(owner.user_id, "owner@studio.test", Role.OWNER, owner.id, owner.name),
        teacher_ctx=context(teacher.user_id, "teacher@studio.test", Role.TEACHER, teacher.id, teacher.name),
        parent_ctx=context(parent.user_id, "parent@studio.test", Role.PARENT, parent.id, parent.name),
        other_parent_ctx=context(other_parent.user_id, "other@studio.test", Role.PARENT, other_parent.id, other_parent.name),
    )


@pytest.fixture
def studio(db_service):
    return seed_studio(db_service)


# --- API fixtures ---

@pytest.fixture
def api_db(tmp_path):
    engine = _make_engine(f"sqlite:///{tmp_path / 'api.db'}")
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield TestingSessionLocal
    engine.dispose()


@pytest.fixture
def api_studio(api_db):
    session = api_db()
    try:
        yield seed_studio(DatabaseService(db_session=session))
    finally:
        session.close()


@pytest.fixture
def client(api_db):
    from studioalign.main import app

    def override_get_db():
        session = api_db()
        try:
            yield session
        finally:
            session.close()

    test_feed = ChangeFeed()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_change_feed] = lambda: test_feed
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {security.create_access_token(subject=user_id)}"}
