"""
Database handle and scoped transaction management
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

import logging

logger = logging.getLogger(__name__)

# Create declarative base for models
Base = declarative_base()


class Database:
    """
    Owns the async engine and session factory.

    Constructed once at startup and handed to the services that need it;
    ``dispose()`` is the only shutdown path for its connection pool.
    """

    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        pool_size: int = 20,
        max_overflow: int = 40,
        isolation_level: Optional[str] = None,
        lock_timeout_seconds: Optional[float] = None,
    ):
        engine_kwargs = {
            "echo": echo,
            "pool_pre_ping": True,
        }
        if not url.startswith("sqlite"):
            engine_kwargs["pool_size"] = pool_size
            engine_kwargs["max_overflow"] = max_overflow
        if isolation_level:
            engine_kwargs["isolation_level"] = isolation_level

        self.url = url
        self.lock_timeout_seconds = lock_timeout_seconds
        self.engine = create_async_engine(url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,  # Don't expire objects after commit
            autoflush=False,
        )

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Plain session for read-only work"""
        async with self.session_factory() as session:
            yield session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """
        Scoped unit of work.

        Usage:
            async with database.transaction() as session:
                ...

        Commits when the block exits cleanly and rolls back on any
        exception (including cancellation), then closes the session.
        """
        async with self.session_factory() as session:
            async with session.begin():
                if self.dialect == "postgresql" and self.lock_timeout_seconds:
                    lock_timeout_ms = int(self.lock_timeout_seconds * 1000)
                    await session.execute(
                        text(f"SET LOCAL lock_timeout = '{lock_timeout_ms}ms'")
                    )
                yield session

    async def ping(self) -> bool:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def create_all(self):
        """
        Initialize database tables.
        Only for development and tests - use migrations in production.
        """
        # Import all models to register them with Base
        from event_booking import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self):
        """
        Drop all database tables.
        WARNING: Use only in development/testing!
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self):
        await self.engine.dispose()
        logger.info("Database engine disposed")

