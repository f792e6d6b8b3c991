"""Pytest configuration and fixtures."""

from typing import AsyncGenerator

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from ttl_shortener.core.setting import Settings
from ttl_shortener.db.session import Database
from ttl_shortener.main import create_app


class SequenceGenerator:
    """Code generator that hands out predefined codes, repeating the last one."""

    def __init__(self, *codes: str):
        self.codes = list(codes)
        self.calls = 0

    def generate(self, length=None) -> str:
        code = self.codes[min(self.calls, len(self.codes) - 1)]
        self.calls += 1
        return code


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway SQLite file."""
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        BASE_URL="http://testserver",
        AUTO_CREATE_TABLES=True,
        RATE_LIMIT_ENABLED=False,
        LOG_LEVEL="DEBUG",
    )


@pytest.fixture
async def database(test_settings) -> AsyncGenerator[Database, None]:
    """Connected database with the schema created."""
    db = Database(test_settings.DATABASE_URL)
    await db.connect(create_tables=True)

    yield db

    await db.disconnect()


@pytest.fixture
async def session(database):
    async with database.session() as session:
        yield session


@pytest.fixture
def client(test_settings):
    """TestClient running the full app lifespan."""
    app = create_app(test_settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
async def async_client(test_settings, database) -> AsyncGenerator[AsyncClient, None]:
    """Async client for concurrency tests; the app shares the connected test database."""
    app = create_app(test_settings)
    app.state.database = database
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
