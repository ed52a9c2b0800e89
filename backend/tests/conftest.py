"""
TaskBoard Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment is pointed at throwaway SQLite/upload locations before
       any `app` module is imported; API tests run against a fresh
       aiosqlite database per test through ASGITransport.

Fixtures:
    mock_db_session:   AsyncMock standing in for AsyncSession (unit tests)
    temp_storage:      Temporary upload directory
    sample_image_bytes: Minimal PNG payload
    db_engine:         Async engine on a per-test SQLite file, tables created
    test_client:       httpx AsyncClient with get_db_session overridden
    auth_headers:      Bearer header for a freshly registered user
"""

import os
import tempfile
from typing import AsyncGenerator, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup (must run before importing app modules)
# ══════════════════════════════════════════════════════════════════════════

_TEST_ROOT = tempfile.mkdtemp(prefix="taskboard_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/app.db"
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["LOG_LEVEL"] = "WARNING"

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from app.database import build_engine, create_tables, get_db_session  # noqa: E402

TEST_PASSWORD = "s3cret-pass"


# ══════════════════════════════════════════════════════════════════════════
# Unit-Test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = task
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "uploads"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """Smallest PNG header that still looks like a PNG: signature + IHDR start."""
    return (
        b"\x89PNG\r\n\x1a\n"
        b"\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00"
        b"\x1f\x15\xc4\x89"
    )


# ══════════════════════════════════════════════════════════════════════════
# API-Test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path}/test.db")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def test_client(db_engine) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to the FastAPI app in-process.

    get_db_session is overridden to hand out sessions bound to db_engine,
    with the same commit/rollback behavior as the real dependency.
    """
    from app.main import app

    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db_session():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


async def register_and_login(client: AsyncClient, email: str) -> Dict[str, str]:
    """Create an account and return an Authorization header for it."""
    response = await client.post(
        "/api/auth/register", json={"email": email, "password": TEST_PASSWORD}
    )
    assert response.status_code == 201, response.text
    response = await client.post(
        "/api/auth/login", json={"email": email, "password": TEST_PASSWORD}
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest_asyncio.fixture
async def auth_headers(test_client) -> Dict[str, str]:
    return await register_and_login(test_client, "alice@example.com")


@pytest.fixture
def login_as(test_client):
    """Returns an async helper: `headers = await login_as("bob@example.com")`."""

    async def _login(email: str) -> Dict[str, str]:
        return await register_and_login(test_client, email)

    return _login
