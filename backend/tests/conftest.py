"""
Blog API Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (real SQLite database, mocked
       session, API client wired to the test database).
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── engine:            aiosqlite engine on a per-test database file,
    │                      schema created, foreign keys enforced
    ├── session_factory:   async_sessionmaker bound to `engine`
    ├── db_session:        one AsyncSession for service/repository tests
    ├── mock_db_session:   Mock database session (failure injection)
    ├── app:               create_app() with the DB dependency and the
    │                      credential verifier pointed at `engine`
    └── test_client:       HTTPX AsyncClient for API endpoint testing
"""

import os
import tempfile

# Override settings for testing BEFORE any blogapi imports
# Why: blogapi.config builds `settings` (and blogapi.database the engine)
# at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["BCRYPT_ROUNDS"] = "4"  # Minimum work factor keeps hashing fast
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests
os.environ["ENABLE_CONSOLE_LOG"] = "false"
os.environ["STATIC_DIR"] = tempfile.mkdtemp(prefix="blogapi_static_")

from typing import AsyncGenerator  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from blogapi.database import Base, enable_sqlite_foreign_keys, get_db_session  # noqa: E402
from blogapi.main import create_app  # noqa: E402
from blogapi.models import Comment, Post, User  # noqa: E402,F401
from blogapi.security import DatabaseCredentialVerifier  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine(tmp_path):
    """
    A fresh SQLite database file per test.

    Why a file (not :memory:): every session gets its own connection, as
    with PostgreSQL, instead of all sessions sharing one in-memory handle.
    """
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'blog_test.db'}")
    enable_sqlite_foreign_keys(test_engine)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    One session for direct service / repository calls.

    Not meant to be combined with `test_client` in the same test: seed API
    tests through the API itself.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    What:    An AsyncMock that simulates AsyncSession behavior.
    Why:     Failure injection (storage errors) and "no query ran" checks.

    Usage:
        async def test_empty_keyword(mock_db_session):
            with pytest.raises(ValidationError):
                await query_service.search_posts(mock_db_session, " ", 1, 5)
            mock_db_session.execute.assert_not_called()
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# API Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app(session_factory):
    """
    The real application, with storage redirected to the test database.

    The session dependency is overridden with the same commit/rollback
    contract as blogapi.database.get_db_session.
    """
    application = create_app(
        credential_verifier=DatabaseCredentialVerifier(session_factory=session_factory)
    )

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db_session] = override_get_db_session
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    What:    HTTPX AsyncClient configured to talk to our FastAPI app.
    How:     Uses ASGITransport to route requests directly to the app
             (no server, no lifespan events).

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Seed helpers
# ══════════════════════════════════════════════════════════════════════════

async def create_user_via_api(client: AsyncClient, name="Alice", email="alice@example.com",
                              password="s3cret") -> dict:
    response = await client.post(
        "/users", json={"name": name, "email": email, "password": password}
    )
    assert response.status_code == 200, response.text
    return response.json()["data"]


async def create_post_via_api(client: AsyncClient, user_id: int, title="Hello",
                              body="First post") -> dict:
    response = await client.post(
        "/posts", json={"user_id": user_id, "title": title, "body": body}
    )
    assert response.status_code == 200, response.text
    return response.json()["data"]
