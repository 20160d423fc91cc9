"""Pytest configuration and fixtures."""

import os

# Settings are read once at import time, so the environment must be ready first
SQLALCHEMY_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///./test.db")
os.environ["DATABASE_URL"] = SQLALCHEMY_DATABASE_URL
os.environ.setdefault("JWT_ACCESS_SECRET", "test-access-secret-0123456789abcdefghij")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret-0123456789abcdefghij")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from timetrack import models  # noqa: E402, F401
from timetrack.database import Base, build_engine, get_db  # noqa: E402
from timetrack.main import app  # noqa: E402

engine = build_engine(SQLALCHEMY_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_PASSWORD = "testpass123"  # noqa: S105


class AuthHeaders(dict):
    """Dict subclass that also stores the user's id, email and refresh token."""

    def __init__(self, *args, user_id=None, email=None, refresh_token=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email
        self.refresh_token = refresh_token


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield
    # Leave the schema in place for the next run; each test cleans up after itself


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.state.rate_limiter.reset()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register_and_login(client, email: str, password: str = TEST_PASSWORD) -> AuthHeaders:
    """Register a user, log in, and return bearer headers for it."""
    response = client.post("/auth/register", json={"email": email, "password": password})
    assert response.status_code == 201
    user_id = response.json()["data"]["user_id"]

    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    tokens = response.json()["data"]

    return AuthHeaders(
        {"Authorization": f"Bearer {tokens['access_token']}"},
        user_id=user_id,
        email=email,
        refresh_token=tokens["refresh_token"],
    )


@pytest.fixture
def auth_headers(client):
    """Create a user and return auth headers with user info."""
    return register_and_login(client, "test@example.com")


@pytest.fixture
def other_auth_headers(client):
    """A second, unrelated user."""
    return register_and_login(client, "other@example.com")


@pytest.fixture
def subject(client, auth_headers):
    """A subject owned by the ``auth_headers`` user."""
    response = client.post(
        "/subjects", headers=auth_headers, json={"name": "Programming", "color": "#FF5733"}
    )
    assert response.status_code == 201
    return response.json()["data"]
