"""
Userbase Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own SQLite file (aiosqlite driver) under tmp_path,
       so tests exercise real SQL without a PostgreSQL server.

Fixture Hierarchy (all function-scoped):
    test_settings ──┬── engine ── session_factory ── user_service
                    └── test_app ── test_client
    unavailable_client: app whose database cannot be opened
    mock_db_session: AsyncMock session for pure unit tests
"""

import os

# Override settings BEFORE any app import: app.main builds a module-level app
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./userbase_test.db"
os.environ["DB_SCHEMA_MODE"] = "none"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("APP_PROFILE", None)

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.config import Settings  # noqa: E402
from app.database import apply_schema_mode, build_engine, build_session_factory  # noqa: E402
from app.services.user_service import UserService  # noqa: E402


def sqlite_url(path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def test_settings(tmp_path):
    """Settings pointing at a fresh SQLite file."""
    return Settings(
        database_url=sqlite_url(tmp_path / "userbase.db"),
        db_schema_mode="create",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def engine(test_settings):
    engine = build_engine(test_settings)
    await apply_schema_mode(engine, test_settings.db_schema_mode)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def user_service(session_factory):
    return UserService(session_factory)


@pytest_asyncio.fixture
async def test_app(test_settings):
    """
    A fully composed app with its schema created.

    ASGITransport does not run the lifespan, so the fixture applies the
    schema mode and disposes the engine itself.
    """
    from app.main import create_app

    app = create_app(test_settings)
    await apply_schema_mode(app.state.engine, test_settings.db_schema_mode)
    yield app
    await app.state.engine.dispose()


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/api/users")
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def unavailable_client(tmp_path):
    """Client for an app whose SQLite file lives in a directory that does not exist."""
    from app.main import create_app

    settings = Settings(
        database_url=sqlite_url(tmp_path / "missing" / "userbase.db"),
        db_schema_mode="none",
    )
    app = create_app(settings)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    await app.state.engine.dispose()


@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.get.return_value = None
        assert await UserRepository(mock_db_session).delete(user) is False
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def ann():
    return {"id": "1", "firstName": "Ann", "lastName": "Lee"}


@pytest.fixture
def bo():
    return {"id": "2", "firstName": "Bo", "lastName": "Kim"}
