"""Pytest configuration and fixtures."""

import os

# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    os.environ["DATABASE_URL"] = os.environ["DATABASE_URL"].replace("/accounts", "/accounts_test")
else:
    # Running locally - use SQLite
    os.environ["DATABASE_URL"] = "sqlite:///./test.db"

# Minimum bcrypt cost keeps the suite fast
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

from src.database import Base, SessionLocal, engine, get_db
from src.main import app
from src.services.session_manager import SessionManager

SQLALCHEMY_DATABASE_URL = os.environ["DATABASE_URL"]

ANN = {
    "name": "Ann Lee",
    "email": "ann@x.com",
    "password": "Secr3t!",
    "phone": "+15550001111",
    "country": "US",
    "city": "NY",
}


class AuthHeaders(dict):
    """Dict subclass that also stores user_id and the raw token."""

    def __init__(self, *args, user_id: str | None = None, token: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.token = token


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        # For PostgreSQL, create the test database
        from sqlalchemy_utils import create_database, database_exists

        # Create test database if it doesn't exist
        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = SessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def manager(db):
    """Session manager bound to the test session."""
    return SessionManager.from_session(db)


@pytest.fixture
def ann():
    """Registration payload for the reference user."""
    return dict(ANN)


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client, ann):
    """Register a user and return auth headers with user info."""
    response = client.post("/api/v1/auth/register", json=ann)
    assert response.status_code == 200
    data = response.json()
    token = data["token"]

    return AuthHeaders(
        {"Authorization": f"Bearer {token}"}, user_id=data["user"]["id"], token=token
    )
