"""
Feed Backend — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Reusable test infrastructure: in-memory store, API client, mock sessions.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── db_engine: in-memory SQLite engine with the posts table created
    ├── session_factory: sessions bound to db_engine
    ├── image_service: ImageService over the test images directory
    ├── test_app: create_app() with the store and image service injected
    ├── test_client: HTTPX AsyncClient talking to test_app
    ├── mock_db_session: AsyncMock standing in for AsyncSession
    └── sample_png_bytes: tiny PNG payload for upload tests
"""

import os
import tempfile

# Override settings BEFORE any feed_backend import: the engine and the
# image directory are created at import time.
_TEST_ROOT = tempfile.mkdtemp(prefix="feed_backend_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/test.db"
os.environ["IMAGES_DIR"] = os.path.join(_TEST_ROOT, "images")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DEFAULT_IMAGE_URL"] = "images/placeholder.jpeg"
os.environ["CONTENT_MIN_LENGTH"] = "5"

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from feed_backend.config import settings  # noqa: E402
from feed_backend.database import Base, get_db_session  # noqa: E402
from feed_backend.main import create_app  # noqa: E402
from feed_backend.models.post import Post  # noqa: E402,F401
from feed_backend.services.image_service import ImageService, get_image_service  # noqa: E402


@pytest_asyncio.fixture
async def db_engine():
    """
    Fresh in-memory SQLite database per test.

    StaticPool keeps the single connection alive, so every session sees
    the same in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def image_service():
    """ImageService writing into the directory served by the /images mount."""
    return ImageService(settings.images_dir)


@pytest.fixture
def test_app(session_factory, image_service):
    """
    A fresh app per test with the store bound to the in-memory database.

    Tests may add more entries to `test_app.dependency_overrides`.
    """
    app = create_app()

    async def _test_session():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _test_session
    app.dependency_overrides[get_image_service] = lambda: image_service
    return app


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    HTTPX AsyncClient configured to talk to the test app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.commit.side_effect = OperationalError(...)
        await PostStore(mock_db_session).add_post(post)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_png_bytes():
    """PNG signature plus an IHDR chunk: enough bytes to look like a PNG upload."""
    return (
        b"\x89PNG\r\n\x1a\n"
        b"\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00"
        b"\x1f\x15\xc4\x89"
    )
