"""Shared fixtures: settings, an in-memory database, an API client and tokens."""
import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

from collections.abc import AsyncGenerator
from typing import Set

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from storefront import app
from storefront.auth import dependencies
from storefront.db.main import get_session

from factories import make_token


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def session_maker() -> AsyncGenerator[async_sessionmaker, None]:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def revoked_jtis(monkeypatch) -> Set[str]:
    """Stands in for the Redis blocklist; add a jti to revoke it."""
    revoked: Set[str] = set()

    async def fake_token_in_blocklist(jti: str) -> bool:
        return jti in revoked

    monkeypatch.setattr(dependencies, "token_in_blocklist", fake_token_in_blocklist)
    return revoked


@pytest.fixture
async def client(session_maker, revoked_jtis) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict:
    return {"Authorization": f"Bearer {make_token(is_admin=True)}"}


@pytest.fixture
def shopper_headers() -> dict:
    return {"Authorization": f"Bearer {make_token(is_admin=False)}"}
