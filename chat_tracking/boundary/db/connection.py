"""
Database connection management.

Provides the Database provider: one async SQLAlchemy engine with a
bounded connection pool, scoped sessions and a transaction primitive.

Dependencies: sqlalchemy, chat_tracking.configs
System role: Database connection lifecycle management
"""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from chat_tracking.boundary.db.base import Base
from chat_tracking.configs.database import DatabaseSettings
from chat_tracking.core.exceptions import PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def get_async_engine(db_config: DatabaseSettings) -> AsyncEngine:
    """
    Create async SQLAlchemy engine with connection pooling.

    Pool ceiling is pool_max: pool_size keeps pool_min connections and
    max_overflow allows the rest. Callers past the ceiling wait up to
    pool_timeout. pool_pre_ping=True detects stale connections early.

    Args:
        db_config: Database settings

    Returns:
        AsyncEngine: Configured async SQLAlchemy engine

    Raises:
        ArgumentError: If database URL is invalid or engine creation fails
    """
    engine_kwargs: dict[str, Any] = {
        "echo": db_config.echo_sql,
        "pool_pre_ping": True,
    }

    # SQLite uses its own single-file pool; sizing only applies to servers
    if not db_config.is_sqlite:
        engine_kwargs.update(
            {
                "pool_size": db_config.pool_min,
                "max_overflow": db_config.pool_max - db_config.pool_min,
                "pool_timeout": db_config.pool_timeout,
                "pool_recycle": db_config.pool_recycle,
                "connect_args": {"timeout": db_config.connection_timeout},
            }
        )

    engine = create_async_engine(db_config.async_database_url, **engine_kwargs)
    if db_config.is_sqlite:
        _use_immediate_transactions(engine)
    return engine


def _use_immediate_transactions(engine: AsyncEngine) -> None:
    """
    Make SQLite take its write lock when a transaction begins.

    pysqlite defers BEGIN until the first DML statement, which lets two
    writers read the same MAX(sequence_number). BEGIN IMMEDIATE queues
    them on the database lock instead, like the session row lock on
    PostgreSQL.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class Database:
    """
    Connection/transaction provider over a pooled async engine.

    Every scope opened here releases its connection on exit, whatever
    the outcome. Storage failures surface as PersistenceError.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        """
        Initialize provider around an engine.

        Args:
            engine: Async SQLAlchemy engine owning the pool
        """
        self.engine = engine
        self._session_factory = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, db_config: DatabaseSettings) -> "Database":
        """
        Build provider from database settings.

        Args:
            db_config: Database settings

        Returns:
            Database: Provider with its own engine
        """
        return cls(get_async_engine(db_config))

    @property
    def dialect_name(self) -> str:
        """SQL dialect of the underlying engine (postgresql, sqlite, ...)."""
        return self.engine.dialect.name

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[AsyncSession]:
        """
        Yield a scoped session holding one pooled connection.

        Yields:
            AsyncSession: Session closed (connection released) on exit

        Raises:
            PersistenceError: If a storage operation fails inside the scope
        """
        async with self._session_factory() as session:
            try:
                yield session
            except (SQLAlchemyError, OSError) as exc:
                logger.error("Database operation failed: %s", exc)
                raise PersistenceError(
                    "Database operation failed",
                    details={"error_type": type(exc).__name__, "error_msg": str(exc)},
                ) from exc

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """
        Yield a session inside BEGIN; commit on success, rollback on error.

        Yields:
            AsyncSession: Session with an open transaction

        Raises:
            PersistenceError: If a storage operation fails (after rollback)
        """
        async with self.acquire() as session:
            async with session.begin():
                yield session

    async def with_transaction(self, fn: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """
        Run fn inside one transaction and return its result.

        Args:
            fn: Coroutine function receiving the transactional session

        Returns:
            Whatever fn returns, after commit
        """
        async with self.transaction() as session:
            return await fn(session)

    async def ping(self) -> bool:
        """
        Round-trip a trivial query to check connectivity.

        Returns:
            bool: True if the database answered
        """
        try:
            async with self.acquire() as session:
                await session.execute(text("SELECT 1"))
            return True
        except PersistenceError:
            logger.warning("Database ping failed")
            return False

    async def create_schema(self) -> None:
        """Create all registered tables (CREATE TABLE IF NOT EXISTS)."""
        # Register models with Base.metadata
        from chat_tracking.boundary.db import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured")

    async def drop_schema(self) -> None:
        """Drop all registered tables. Development and tests only."""
        from chat_tracking.boundary.db import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()
        logger.info("Database pool disposed")
