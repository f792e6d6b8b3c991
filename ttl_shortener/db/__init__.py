"""
Database module with abstraction layer.

This module provides:
- DatabaseAdapter interface: Abstract base class for database implementations
- SQLiteAdapter: SQLite-specific implementation (default)
- Database: the store client owned by the application lifespan
"""

from ttl_shortener.db.interface import DatabaseAdapter
from ttl_shortener.db.session import Database, get_session

__all__ = [
    "DatabaseAdapter",
    "Database",
    "get_session",
]
