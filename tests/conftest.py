import itertools
import os

# Keep the app's own engine off the filesystem; must run before clubhouse imports.
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import clubhouse.models  # noqa: F401
from clubhouse.core.security import create_access_token
from clubhouse.db.base import Base
from clubhouse.db.session import get_db
from clubhouse.main import app
from clubhouse.models.club import ClubRoleEnum, MemberTierEnum
from clubhouse.models.user import User, SystemRoleEnum
from clubhouse.services.club_service import club_service


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def make_user(db):
    counter = itertools.count(1)

    def _make(name=None, system_role=SystemRoleEnum.USER):
        n = next(counter)
        user = User(
            email=f"user{n}@example.com",
            hashed_password="not-a-real-hash",
            name=name or f"User {n}",
            system_role=system_role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture()
def leader(make_user):
    return make_user("Leader")


@pytest.fixture()
def admin(make_user):
    return make_user("Admin", system_role=SystemRoleEnum.ADMIN)


@pytest.fixture()
def club(db, leader):
    return club_service.create_club(db, "Chess Club", leader.id, "Weekly games")


@pytest.fixture()
def make_member(db, make_user, leader):
    """Create a user and walk them through join -> approve -> role/tier."""

    def _make(club, role=ClubRoleEnum.READER, tier=MemberTierEnum.JUNIOR, name=None):
        user = make_user(name)
        request = club_service.request_join(db, club.id, user.id)["request"]
        club_service.approve_member(db, club.id, request.id, leader.id, SystemRoleEnum.USER)
        changes = {}
        if role != ClubRoleEnum.READER:
            changes["role"] = role
        if tier != MemberTierEnum.JUNIOR:
            changes["tier"] = tier
        if changes:
            club_service.update_member_role_tier(db, leader.id, club.id, request.id, changes)
        return user

    return _make


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)


def auth_headers(user) -> dict:
    token = create_access_token(user.id, user.system_role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def headers_for():
    return auth_headers
