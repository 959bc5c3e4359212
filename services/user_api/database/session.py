"""Async database session management using SQLAlchemy.

Provides the engine and async session factory for the user store. The
default URL is an in-memory SQLite database; because every new SQLite
memory connection is a separate empty database, that case is pinned to a
single shared connection, and sessions on it run one at a time.
"""

import asyncio
import logging
from contextlib import asynccontextmanager, nullcontext
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from services.user_api.database.models import Base

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Async database manager using SQLAlchemy.

    Provides a shared engine and session factory for the user store.
    """

    def __init__(self, database_url: str, echo: bool = False):
        """Initialize the database manager.

        Args:
            database_url: Async SQLAlchemy connection URL
            echo: Enable SQL logging
        """
        self._database_url = database_url
        self._echo = echo

        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        # All sessions share one connection, hence one transaction, in memory
        self._memory_lock = asyncio.Lock()

    @property
    def is_memory_sqlite(self) -> bool:
        return self._database_url.startswith("sqlite") and (
            ":memory:" in self._database_url or self._database_url.endswith("://")
        )

    @property
    def engine(self) -> AsyncEngine:
        """Get the async engine, creating it if needed."""
        if self._engine is None:
            if self.is_memory_sqlite:
                self._engine = create_async_engine(
                    self._database_url,
                    echo=self._echo,
                    connect_args={"check_same_thread": False},
                    poolclass=StaticPool,
                )
            else:
                self._engine = create_async_engine(
                    self._database_url,
                    echo=self._echo,
                    pool_pre_ping=True,
                )
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get the session factory, creating it if needed."""
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=True,
            )
        return self._session_factory

    async def connect(self) -> None:
        """Initialize the database connection and create tables."""
        logger.info("Connecting to database...")

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("Database connected and tables created")

    async def disconnect(self) -> None:
        """Close the database connection pool."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database connection closed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get an async session that commits on success and rolls back on error.

        Usage:
            async with db_manager.session() as session:
                result = await session.execute(query)
        """
        async with self._memory_lock if self.is_memory_sqlite else nullcontext():
            session = self.session_factory()
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()
