"""
SQLite Database Adapter

This module implements the DatabaseAdapter interface for SQLite.
All SQLite-specific configuration and behavior is encapsulated here.

Key characteristics:
- File-based (single .db file)
- No server required
- Single writer at a time (file locking); concurrent inserts wait on the lock
"""

from typing import Any
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from ttl_shortener.db.interface import DatabaseAdapter

# Seconds a connection waits for the SQLite write lock
SQLITE_LOCK_TIMEOUT = 15


def _set_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    # WAL lets lookups proceed while a create holds the write lock
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter implementation.

    SQLite uses file-based storage, so every session opens its own
    connection and the file lock serializes writers.
    """

    def create_engine(self, database_url: str, **kwargs) -> AsyncEngine:
        """
        Create SQLite async engine with appropriate configuration.

        Args:
            database_url: SQLite connection string (sqlite+aiosqlite:///...)
            **kwargs: Additional engine options (merged with SQLite defaults)

        Returns:
            Configured AsyncEngine for SQLite
        """
        engine_kwargs = self.get_engine_kwargs()
        engine_kwargs.update(kwargs)

        engine = create_async_engine(
            database_url,
            poolclass=self.get_pool_class(),
            connect_args=self.get_connect_args(),
            **engine_kwargs
        )
        event.listen(engine.sync_engine, "connect", _set_sqlite_pragmas)
        return engine

    def get_pool_class(self) -> type[NullPool]:
        """
        SQLite uses NullPool: a file-based database gains nothing from pooling.
        """
        return NullPool

    def get_connect_args(self) -> dict[str, Any]:
        return {
            "check_same_thread": False,
            "timeout": SQLITE_LOCK_TIMEOUT,
        }

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False  # Set to True only for SQL debugging in development
        }

    def get_dialect_name(self) -> str:
        return "sqlite"


_ADAPTERS = {
    "sqlite": SQLiteAdapter,
}


def get_database_adapter(database_url: str) -> DatabaseAdapter:
    """
    Factory function to get the database adapter for a connection string.

    Args:
        database_url: SQLAlchemy URL, e.g. sqlite+aiosqlite:///./urlshortener.db

    Returns:
        DatabaseAdapter instance

    Raises:
        ValueError: If no adapter supports the URL's dialect
    """
    dialect = make_url(database_url).get_backend_name()
    try:
        return _ADAPTERS[dialect]()
    except KeyError:
        raise ValueError(f"Unsupported database dialect: '{dialect}'") from None
