"""
Pytest configuration and fixtures for backend tests.
"""

import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Set test environment variables before importing config
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["AUTO_CREATE_DB"] = "false"
os.environ["CORS_ORIGINS"] = "http://localhost:3000"
os.environ.pop("SENTRY_DSN", None)

from authentication.auth import create_access_token  # noqa: E402
from repositories.database import Base, get_db  # noqa: E402
import repositories.db_models as db_models  # noqa: E402

# Test database engine (in-memory SQLite)
TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh in-memory database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with overridden database dependency."""
    from main import app
    from helpers.rate_limiter import limiter

    # Reset rate limiter storage before each test to prevent rate limit errors
    limiter.reset()

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_user(
    db_session, username: str, full_name: str, is_admin: bool = False
) -> db_models.User:
    """Insert a user row and return it refreshed."""
    user = db_models.User(
        username=username,
        full_name=full_name,
        email=f"{username}@example.com",
        is_active=True,
        is_admin=is_admin,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def test_user(db_session) -> db_models.User:
    """Create a resident who files reports."""
    return make_user(db_session, "reporter", "Amina Reporter")


@pytest.fixture
def other_user(db_session) -> db_models.User:
    """Create a second resident."""
    return make_user(db_session, "neighbour", "Baraka Neighbour")


@pytest.fixture
def author_user(db_session) -> db_models.User:
    """Create the author of the reported post."""
    return make_user(db_session, "author", "Chausiku Author")


@pytest.fixture
def admin_user(db_session) -> db_models.User:
    """Create an admin."""
    return make_user(db_session, "moderator", "Admin Moderator", is_admin=True)


@pytest.fixture
def test_post(db_session, author_user) -> db_models.Post:
    """Create a post that can be reported."""
    post = db_models.Post(
        id="post-1",
        title="Selling a bicycle",
        type="MARKETPLACE",
        author_id=author_user.id,
    )
    db_session.add(post)
    db_session.commit()
    db_session.refresh(post)
    return post


@pytest.fixture
def pending_report(db_session, test_user, test_post) -> db_models.Report:
    """Create a PENDING report against test_post."""
    report = db_models.Report(
        post_id=test_post.id,
        reported_by_id=test_user.id,
        reason=db_models.ReportReason.SPAM,
        description="Posted the same ad ten times",
        status=db_models.ReportStatus.PENDING,
    )
    db_session.add(report)
    db_session.commit()
    db_session.refresh(report)
    return report


def headers_for(user: db_models.User) -> dict:
    """Bearer headers for a user."""
    token = create_access_token(data={"sub": user.id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(test_user) -> dict:
    """Get authentication headers for test user."""
    return headers_for(test_user)


@pytest.fixture
def other_auth_headers(other_user) -> dict:
    """Get authentication headers for the second resident."""
    return headers_for(other_user)


@pytest.fixture
def author_auth_headers(author_user) -> dict:
    """Get authentication headers for the post author."""
    return headers_for(author_user)


@pytest.fixture
def admin_auth_headers(admin_user) -> dict:
    """Get authentication headers for admin user."""
    return headers_for(admin_user)
