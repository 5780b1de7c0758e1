"""
Firenotes — Database Session Management
========================================

What:  Async SQLAlchemy engine, session factory and declarative base used by
       the SQL document store backend.
Why:   Lets the application run against a local SQLite file (or PostgreSQL)
       when no Firebase project is available. The Firestore backend does not
       touch this module at runtime.
How:   Builds an async engine from settings; pool sizing arguments are only
       passed to drivers that use a queue pool (not SQLite).

Connection Pooling Strategy (PostgreSQL):
    pool_size / max_overflow from settings, pre-ping to catch stale
    connections after a database restart, hourly recycle.
"""

from typing import Any, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from firenotes.config import Settings, settings


def build_engine(config: Settings) -> AsyncEngine:
    """
    Create an async engine for the configured database URL.

    SQLite uses a single-file (or static in-memory) pool that rejects
    pool_size/max_overflow, so those are only applied to server databases.
    """
    kwargs: Dict[str, Any] = {"echo": config.log_level == "DEBUG"}
    if not config.is_sqlite:
        kwargs.update(
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            pool_pre_ping=config.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(config.database_url, **kwargs)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: rows stay readable after the unit of work commits
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


# ── Engine & Session Factory ──────────────────────────────────────────────
# Creating the engine does not connect; the first query does.
engine = build_engine(settings)
async_session_factory = build_session_factory(engine)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object so Alembic and `create_schema()` see
    every table.
    """
    pass


async def create_schema(bind: AsyncEngine) -> None:
    """
    What:  Creates missing tables on the given engine.
    When:  At startup for the SQL backend, and by the test fixtures.
    Why:   A fresh SQLite file is usable without running Alembic first.
    """
    # Import models so they register with Base.metadata
    from firenotes.models import document  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Closes pooled connections at application shutdown."""
    await engine.dispose()
