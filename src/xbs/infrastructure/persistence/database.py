"""Database abstraction layer using SQLAlchemy 2.0 async.

This module provides the database session management and engine configuration
for SQLAlchemy with async support. It supports both SQLite (aiosqlite) and
PostgreSQL (asyncpg) drivers.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from xbs.core.config import Settings
from xbs.core.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class DatabaseManager:
    """Database connection and session manager.

    This class manages the async database engine and session factory.
    One instance is created per application and disposed on shutdown.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize the database manager.

        Args:
            settings: Application settings holding the database URL and pool options.
        """
        self.settings = settings
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    def _engine_options(self) -> dict[str, Any]:
        """Build keyword arguments for create_async_engine."""
        options: dict[str, Any] = {"echo": self.settings.db_echo}
        if self.settings.is_sqlite:
            options["connect_args"] = {"check_same_thread": False}
        # In-memory SQLite uses a StaticPool, which takes no sizing options
        if ":memory:" not in self.settings.database_url:
            options.update(
                pool_size=self.settings.db_pool_size,
                max_overflow=self.settings.db_max_overflow,
                pool_timeout=self.settings.db_pool_timeout,
                pool_recycle=self.settings.db_pool_recycle,
            )
        return options

    @property
    def engine(self) -> AsyncEngine:
        """Get or create the database engine.

        Returns:
            AsyncEngine: SQLAlchemy async engine instance.
        """
        if self._engine is None:
            self._engine = create_async_engine(
                self.settings.database_url, **self._engine_options()
            )
            if self.settings.is_sqlite:
                self._register_sqlite_pragmas(self._engine)

            logger.info(
                "Database engine created",
                database_url=self._engine.url.render_as_string(hide_password=True),
            )
        return self._engine

    def _register_sqlite_pragmas(self, engine: AsyncEngine) -> None:
        """Apply the configured SQLite pragmas on every new connection."""
        settings = self.settings

        @event.listens_for(engine.sync_engine, "connect")
        def set_sqlite_pragmas(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute(f"PRAGMA journal_mode={settings.db_sqlite_journal_mode}")
            cursor.execute(f"PRAGMA synchronous={settings.db_sqlite_synchronous}")
            cursor.execute(f"PRAGMA busy_timeout={int(settings.db_sqlite_busy_timeout)}")
            cursor.close()

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get or create the session factory.

        Returns:
            async_sessionmaker: SQLAlchemy async session factory.
        """
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
            logger.debug("Database session factory created")
        return self._session_factory

    async def create_tables(self) -> None:
        """Create all database tables that do not exist yet."""
        # Import models so they are registered with Base.metadata
        from xbs.infrastructure.persistence import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created")

    async def drop_tables(self) -> None:
        """Drop all database tables.

        WARNING: This will delete all data. Only use in testing!
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            logger.warning("Database tables dropped")

    async def disconnect(self) -> None:
        """Close the database engine and all connections.

        Should be called on application shutdown.
        """
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database engine disposed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a transactional scope for database operations.

        Anything not committed when the block exits, normally or through an
        exception or cancellation, is rolled back.

        Yields:
            AsyncSession: SQLAlchemy async session.

        Example:
            async with db.session() as session:
                result = await session.execute(select(BookmarksModel))
        """
        async with self.session_factory() as session:
            try:
                yield session
            except BaseException:
                await session.rollback()
                raise

    async def check_connection(self) -> bool:
        """Check if database connection is working.

        Returns:
            bool: True if connection is successful, False otherwise.
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
                logger.debug("Database connection check successful")
                return True
        except Exception as e:
            logger.error("Database connection check failed", error=str(e))
            return False

    async def init(self) -> None:
        """Initialize the database on startup.

        Creates the SQLite directory when needed, checks connectivity and
        creates missing tables outside production (use migrations there).

        Raises:
            RuntimeError: If the database cannot be reached.
        """
        if self.settings.is_sqlite and ":memory:" not in self.settings.database_url:
            # Extract path from sqlite+aiosqlite:///path/to/file.db
            db_path = self.settings.database_url.split(":///")[-1]
            db_dir = Path(db_path).parent
            db_dir.mkdir(parents=True, exist_ok=True)
            logger.info("Database directory created", path=str(db_dir))

        if not await self.check_connection():
            logger.error("Database connection failed")
            raise RuntimeError("Failed to connect to database")

        if self.settings.is_production:
            logger.info("Production mode: Skipping auto-create, use migrations")
        else:
            await self.create_tables()
