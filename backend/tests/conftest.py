import os
from datetime import date, datetime, timedelta, timezone

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_clock, get_db
from app.core.clock import FixedClock
from app.core.config import get_settings
from app.db.base import Base
from app.main import app
from app.models.user import User, UserRole

# Monday
TODAY = date(2025, 1, 6)


def make_token(user_id: str) -> str:
    settings = get_settings()
    claims = {"sub": user_id, "exp": datetime.now(timezone.utc) + timedelta(hours=1)}
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    yield TestingSessionLocal
    engine.dispose()


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: FixedClock(TODAY)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def _user_headers(session_factory, *, role: UserRole, username: str, faculty_id: str | None = None) -> dict:
    db = session_factory()
    try:
        user = User(username=username, role=role, faculty_id=faculty_id, is_active=True)
        db.add(user)
        db.commit()
        db.refresh(user)
        return {"Authorization": f"Bearer {make_token(user.id)}"}
    finally:
        db.close()


@pytest.fixture()
def admin_headers(session_factory):
    return _user_headers(session_factory, role=UserRole.admin, username="admin")


@pytest.fixture()
def faculty_headers_for(session_factory):
    issued: dict[str, dict] = {}

    def build(faculty_id: str) -> dict:
        if faculty_id not in issued:
            issued[faculty_id] = _user_headers(
                session_factory,
                role=UserRole.faculty,
                username=f"faculty-{faculty_id}",
                faculty_id=faculty_id,
            )
        return issued[faculty_id]

    return build
