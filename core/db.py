from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from core.config import get_settings


class Base(DeclarativeBase):
    pass


settings = get_settings()


def engine_options(url: str) -> dict[str, Any]:
    options: dict[str, Any] = dict(echo=False, future=True, pool_pre_ping=True)
    if not url.startswith("sqlite"):
        options.update(pool_recycle=1800, pool_size=10, max_overflow=20)
    return options


ENGINE_OPTIONS = engine_options(settings.database_url)

engine = create_async_engine(settings.database_url, **ENGINE_OPTIONS)
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_session() -> AsyncIterator[AsyncSession]:
    async with session_scope() as session:
        yield session
