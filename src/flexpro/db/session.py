# src/flexpro/db/session.py
"""
Async engine and session factory for the portal database.

Request handlers take a session through ``Depends(get_db)``; the CLI and
scripts use ``async with get_session()``. Sessions keep attributes loaded
after commit so response models can read them without another round trip.
"""
from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from flexpro.core.config import Settings, settings


def engine_options(config: Settings) -> dict:
    """
    SQLite and test runs get NullPool: each session opens its own connection,
    so one engine can serve the ASGI test client and the CLI's event loops.
    """
    options: dict = {"echo": bool(config.DB_ECHO)}
    if config.TESTING or config.is_sqlite or os.getenv("SQLALCHEMY_NULLPOOL") == "1":
        options["poolclass"] = NullPool
    else:
        options.update(
            pool_pre_ping=True,
            pool_size=config.DB_POOL_SIZE,
            max_overflow=config.DB_MAX_OVERFLOW,
        )
    return options


engine: AsyncEngine = create_async_engine(settings.DATABASE_URL, **engine_options(settings))

AsyncSessionLocal: async_sessionmaker[AsyncSession] = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    class_=AsyncSession,
)


def get_engine() -> AsyncEngine:
    return engine


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    return AsyncSessionLocal


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Session for work outside a request; rolled back if the block raises."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    # FastAPI caches this per request, so the auth dependency and the handler share one session
    async with get_session() as session:
        yield session
