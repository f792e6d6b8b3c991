"""
Database Models for URL Shortener Service

This module defines the SQLModel database schema for UrlMapping, the
association between a short code, its target URL and its expiration instant.

Design Decisions:
- Unique index on short_code: the store itself rejects colliding codes
- Index on expires_at for an external retention job
- Rows are never updated; expired rows stay until removed externally
"""

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import String, DateTime, Text


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UrlMapping(SQLModel, table=True):
    """
    Main table storing URL shortening mappings.

    Fields:
    - id: Auto-incrementing primary key
    - original_url: The redirect target, stored as given
    - short_code: Unique generated code
    - expires_at: Instant after which the mapping no longer resolves
    - created_at: Timestamp when the URL was shortened
    """
    __tablename__ = "url_mappings"

    id: Optional[int] = Field(default=None, primary_key=True)
    original_url: str = Field(sa_column=Column(Text, nullable=False))
    short_code: str = Field(
        sa_column=Column(String(32), nullable=False, unique=True, index=True),
        max_length=32
    )
    expires_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
