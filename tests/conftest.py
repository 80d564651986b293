from __future__ import annotations

import os
from typing import AsyncIterator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Ensure deterministic environment for tests
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRETS_KEY", "Xh4O8zJS1-WxxFjNV8iP-9e1X2-b4PqQjLTrBqkHqBw=")
os.environ.setdefault("ADMIN_PASSWORD", "open-sesame")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_FILE", "")

import httpx

from api.main import app
from core import config as config_module
from core import db as db_module
from core.models import Base
from core.security import SessionSigner

config_module.get_settings.cache_clear()
settings = config_module.get_settings()

ADMIN_PASSWORD = os.environ["ADMIN_PASSWORD"]


@pytest.fixture
async def engine() -> AsyncIterator:
    test_engine = create_async_engine(
        settings.database_url,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    session_factory = async_sessionmaker(test_engine, expire_on_commit=False, class_=AsyncSession)

    saved_engine, saved_factory = db_module.engine, db_module.AsyncSessionLocal
    db_module.engine = test_engine
    db_module.AsyncSessionLocal = session_factory

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    db_module.engine, db_module.AsyncSessionLocal = saved_engine, saved_factory
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine) -> AsyncIterator[AsyncSession]:
    async with db_module.AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest.fixture
async def client(engine) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def admin_client(engine) -> AsyncIterator[httpx.AsyncClient]:
    token = SessionSigner(settings.secrets_key).issue(settings.admin_username)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport,
        base_url="http://test",
        cookies={settings.admin_cookie_name: token},
    ) as client:
        yield client
