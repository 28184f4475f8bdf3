"""Pytest configuration and fixtures."""

import os
import tempfile

# Settings are read once at import time
os.environ.setdefault("INDEX_DIR", tempfile.mkdtemp(prefix="peerstake-index-"))
os.environ["GITHUB_CLIENT_ID"] = ""
os.environ["GITHUB_CLIENT_SECRET"] = ""
os.environ["APP_ENV"] = "test"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, get_db  # noqa: E402
from app.models.goal import Goal  # noqa: E402, F401
from app.models.peer_group import PeerGroup, PeerGroupMember  # noqa: E402, F401
from app.models.user import User  # noqa: E402, F401
from app.services.auth import AuthService  # noqa: E402
from app.services.jwt import get_jwt_service  # noqa: E402


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="client")
def client_fixture(db_session: Session):
    """Create a test client with overridden DB dependency and disabled rate limiting."""
    from app.rate_limit import limiter
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    limiter.enabled = True
    app.dependency_overrides.clear()


def _make_user(db_session: Session, email: str, username: str, password: str = "password123") -> dict:
    result = AuthService().register(db_session, email, username, password)
    assert result.success, result.error
    return {
        "user_id": result.user.id,
        "email": result.user.email,
        "username": result.user.username,
        "token": get_jwt_service().create_token(result.user.id),
    }


@pytest.fixture(name="test_user")
def test_user_fixture(db_session: Session):
    """Create a test user and return its data and token."""
    return _make_user(db_session, "test@example.com", "tester")


@pytest.fixture(name="other_user")
def other_user_fixture(db_session: Session):
    """A second account, for ownership and membership checks."""
    return _make_user(db_session, "other@example.com", "other")


@pytest.fixture(name="auth_client")
def auth_client_fixture(client: TestClient, test_user: dict):
    """Test client carrying test_user's session cookie."""
    client.cookies.set("token", test_user["token"])
    return client


@pytest.fixture(name="switch_user")
def switch_user_fixture(client: TestClient):
    """Return a function that swaps the client's session to another user."""

    def switch(user: dict) -> None:
        client.cookies.clear()
        client.cookies.set("token", user["token"])

    return switch
