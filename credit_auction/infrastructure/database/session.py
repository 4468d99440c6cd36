"""Async SQLAlchemy engine and session management."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from credit_auction.core.config import get_settings
from credit_auction.infrastructure.database.base import Base

_engine: AsyncEngine | None = None
AsyncSessionFactory: async_sessionmaker[AsyncSession] | None = None


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    # aiosqlite issues its own BEGIN lazily, which breaks SAVEPOINT; take over
    # transaction begin so nested transactions behave as on other backends.
    # IMMEDIATE takes the write lock up front, where the busy timeout applies,
    # instead of failing on a later lock upgrade.
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):  # noqa: ARG001
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str | None = None, **overrides: Any) -> AsyncEngine:
    settings = get_settings()
    engine_kwargs: dict[str, Any] = {
        "echo": settings.database.echo or settings.debug,
        "future": True,
    }
    if settings.database.pool_size is not None:
        engine_kwargs["pool_size"] = settings.database.pool_size
    if settings.database.max_overflow is not None:
        engine_kwargs["max_overflow"] = settings.database.max_overflow
    engine_kwargs.update(overrides)

    database_url = url or settings.database_url
    if make_url(database_url).get_backend_name() == "sqlite":
        connect_args = dict(engine_kwargs.get("connect_args") or {})
        connect_args.setdefault("timeout", settings.auction.lock_timeout_seconds)
        engine_kwargs["connect_args"] = connect_args
    engine = create_async_engine(database_url, **engine_kwargs)
    if engine.dialect.name == "sqlite":
        _enable_sqlite_savepoints(engine)
    return engine


def get_engine() -> AsyncEngine:
    global _engine, AsyncSessionFactory
    if _engine is None:
        _engine = build_engine()
        AsyncSessionFactory = async_sessionmaker(
            bind=_engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if AsyncSessionFactory is None:
        get_engine()
    assert AsyncSessionFactory is not None  # for mypy
    return AsyncSessionFactory


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Create database tables in development mode (migrations preferred)."""
    # Import models lazily so metadata is populated without circular imports.
    from credit_auction.db import models  # noqa: F401

    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


LOCK_CONTENTION_MARKERS = (
    "database is locked",
    "database table is locked",
    "could not obtain lock",
    "lock timeout",
    "deadlock detected",
)


def is_lock_contention(exc: DBAPIError) -> bool:
    """True when the driver gave up waiting on another transaction's lock."""
    message = str(exc.orig).lower()
    return any(marker in message for marker in LOCK_CONTENTION_MARKERS)
