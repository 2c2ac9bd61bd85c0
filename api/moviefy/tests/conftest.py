"""Shared pytest fixtures for API tests and database isolation."""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from moviefy.api.deps import get_db, get_metadata_client
from moviefy.core.config import settings
from moviefy.db.base import Base
from moviefy.main import app
from moviefy.sources.observability import source_monitor
from moviefy.tests.utils import ADMIN_KEY, StubMetadataAPI


@pytest.fixture(autouse=True)
def _reset_source_monitor() -> None:
    source_monitor.reset()


@pytest.fixture(autouse=True)
def _admin_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "admin_access_key", ADMIN_KEY)
    monkeypatch.setattr(settings, "health_allowlist", [])


@pytest_asyncio.fixture()
async def session(tmp_path) -> AsyncSession:
    database_url = settings.test_database_url or f"sqlite+aiosqlite:///{tmp_path / 'moviefy-test.db'}"
    engine = create_async_engine(database_url, future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    TestingSession = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    try:
        async with TestingSession() as session:
            yield session
    finally:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await engine.dispose()


@pytest.fixture()
def metadata_api() -> StubMetadataAPI:
    return StubMetadataAPI()


@pytest_asyncio.fixture()
async def client(session: AsyncSession, metadata_api: StubMetadataAPI) -> AsyncClient:
    async def _get_test_db():
        yield session

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_metadata_client] = lambda: metadata_api.client()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as async_client:
        yield async_client
    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_metadata_client, None)
