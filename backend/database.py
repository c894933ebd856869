"""
Database engine and session management for the AlgoSender backend.

Uses SQLAlchemy async engine with aiosqlite for non-blocking DB operations
inside FastAPI. The engine is a process-wide handle created lazily, once,
on first use; concurrent first callers wait on the same lock and share it.
It is disposed only from the app lifespan on shutdown.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""
    pass


# ── Engine ──────────────────────────────────────────────────────────

_engine: AsyncEngine | None = None
_sessionmaker: async_sessionmaker[AsyncSession] | None = None
_init_lock = asyncio.Lock()


def _build_engine(url: str) -> AsyncEngine:
    kwargs = {"echo": False, "future": True}
    if url.startswith("sqlite") and ":memory:" in url:
        # One shared connection, otherwise every session gets an empty DB
        kwargs["connect_args"] = {"check_same_thread": False}
        kwargs["poolclass"] = StaticPool
    return create_async_engine(url, **kwargs)


async def get_engine() -> AsyncEngine:
    """Return the shared engine, creating it on first call."""
    global _engine, _sessionmaker
    if _engine is not None:
        return _engine
    async with _init_lock:
        if _engine is None:
            url = settings.async_database_url
            _engine = _build_engine(url)
            _sessionmaker = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)
            logger.info(f"Database engine created ({url.split(':', 1)[0]})")
    return _engine


async def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    await get_engine()
    return _sessionmaker


async def dispose_engine() -> None:
    """Tear down the shared engine (app shutdown / test teardown)."""
    global _engine, _sessionmaker
    if _engine is not None:
        await _engine.dispose()
        logger.info("Database engine disposed")
    _engine = None
    _sessionmaker = None


# ── Helpers ─────────────────────────────────────────────────────────

async def init_db() -> None:
    """Create all tables. Called once on server startup."""
    # Import models so Base.metadata knows about them
    import db_models  # noqa: F401

    engine = await get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database tables created (or already exist)")


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Standalone session for background work (poller) outside a request."""
    maker = await get_sessionmaker()
    async with maker() as session:
        yield session


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency — yields an async session."""
    maker = await get_sessionmaker()
    async with maker() as session:
        try:
            yield session
        finally:
            await session.close()
