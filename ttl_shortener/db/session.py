"""
Database Session Management

This module owns the store client: an explicitly constructed Database object
wrapping the async engine and session factory. The application creates one
instance, connects it during startup, hands it to request handlers through
app.state, and disposes it on shutdown. Nothing here is a module-level
connection.

Key Features:
- Database abstraction: engine configuration comes from a DatabaseAdapter
- Async session management: commit on success, rollback on exception
- Infrastructure failures surface as StoreUnavailableError
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession as SQLModelAsyncSession

from ttl_shortener.core.exceptions import StoreUnavailableError
from ttl_shortener.db.models import UrlMapping  # noqa: F401  registers the table on SQLModel.metadata
from ttl_shortener.db.interface import DatabaseAdapter
from ttl_shortener.db.sqlite_adapter import get_database_adapter

logger = logging.getLogger(__name__)


class Database:
    """
    Store client shared by all requests of one application instance.

    Lifecycle: construct -> connect() -> session() per request -> disconnect().
    """

    def __init__(self, database_url: str, adapter: Optional[DatabaseAdapter] = None):
        self.database_url = database_url
        self.adapter = adapter or get_database_adapter(database_url)
        self.engine: Optional[AsyncEngine] = None
        self.session_maker: Optional[async_sessionmaker] = None

    @property
    def is_connected(self) -> bool:
        return self.engine is not None

    async def connect(self, create_tables: bool = False) -> None:
        """
        Create the engine and session factory.

        Args:
            create_tables: Run metadata.create_all (development and tests;
                production schemas come from alembic migrations)

        Raises:
            StoreUnavailableError: If the database cannot be reached while
                creating tables
        """
        if self.engine is not None:
            logger.warning("Database already connected")
            return

        engine = self.adapter.create_engine(self.database_url)

        if create_tables:
            try:
                async with engine.begin() as conn:
                    await conn.run_sync(SQLModel.metadata.create_all)
            except SQLAlchemyError as e:
                await engine.dispose()
                raise StoreUnavailableError("failed to initialize schema", original_error=e) from e

        self.engine = engine
        self.session_maker = async_sessionmaker(
            engine,
            class_=SQLModelAsyncSession,
            expire_on_commit=False,  # Returned objects stay readable after commit
            autoflush=False,
        )
        logger.info(f"Connected to {self.adapter.get_dialect_name()} database")

    async def disconnect(self) -> None:
        """Dispose of the engine; in-flight sessions finish on their own connections."""
        if self.engine is None:
            return
        await self.engine.dispose()
        self.engine = None
        self.session_maker = None
        logger.info("Database connection disposed")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Open a session that commits on success and rolls back on any exception.

        Raises:
            StoreUnavailableError: If the database is not connected or an
                unhandled SQLAlchemy error escapes the block
        """
        if self.session_maker is None:
            raise StoreUnavailableError("database is not connected")

        async with self.session_maker() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise StoreUnavailableError(str(e), original_error=e) from e
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> bool:
        """Return True if a trivial query succeeds."""
        if self.engine is None:
            return False
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database ping failed: {e}")
            return False


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function for FastAPI to get a database session.

    Usage in FastAPI:
        @router.get("/endpoint")
        async def endpoint(session: AsyncSession = Depends(get_session)):
            pass
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
