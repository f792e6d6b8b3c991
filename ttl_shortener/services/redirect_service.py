"""
Redirect Service

This service resolves a short code and classifies the result.

Every lookup ends in exactly one outcome:
- NOT_FOUND: no mapping for the code
- EXPIRED: mapping exists and the current time is past expires_at
- ACTIVE: mapping exists and has not expired

Expired mappings are left untouched in the database.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from ttl_shortener.core.exceptions import ShortCodeNotFoundError, URLExpiredError
from ttl_shortener.db.models import UrlMapping
from ttl_shortener.services.url_service import URLShorteningService

logger = logging.getLogger(__name__)


class ResolveOutcome(str, Enum):
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    ACTIVE = "active"


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; they were written as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def classify_mapping(mapping: Optional[UrlMapping], now: datetime) -> ResolveOutcome:
    """
    Classify a looked-up mapping at instant `now`.

    A mapping is still active at exactly its expiration instant.
    """
    if mapping is None:
        return ResolveOutcome.NOT_FOUND
    if as_utc(now) > as_utc(mapping.expires_at):
        return ResolveOutcome.EXPIRED
    return ResolveOutcome.ACTIVE


class RedirectService:
    """
    Service for handling URL redirections.

    Looks mappings up through URLShorteningService and applies the
    expiration check the store layer leaves to its callers.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.url_service = URLShorteningService(session)

    async def resolve(
        self,
        short_code: str,
        now: Optional[datetime] = None,
    ) -> Tuple[ResolveOutcome, Optional[UrlMapping]]:
        """
        Look up a short code and classify it.

        Returns:
            (outcome, mapping); mapping is None only for NOT_FOUND

        Raises:
            StoreUnavailableError: If the lookup fails
        """
        mapping = await self.url_service.get_mapping(short_code)
        outcome = classify_mapping(mapping, now or datetime.now(timezone.utc))
        return outcome, mapping

    async def get_redirect_url(self, short_code: str, now: Optional[datetime] = None) -> str:
        """
        Get the original URL for redirection.

        Raises:
            ShortCodeNotFoundError: If no mapping exists
            URLExpiredError: If the mapping has expired
            StoreUnavailableError: If the lookup fails
        """
        outcome, mapping = await self.resolve(short_code, now)

        if outcome is ResolveOutcome.NOT_FOUND:
            logger.info(f"Short code not found: {short_code}")
            raise ShortCodeNotFoundError(short_code)
        if outcome is ResolveOutcome.EXPIRED:
            logger.info(f"Short code expired: {short_code} (expired {as_utc(mapping.expires_at).isoformat()})")
            raise URLExpiredError(short_code, as_utc(mapping.expires_at))

        logger.debug(f"Redirecting {short_code} -> {mapping.original_url}")
        return mapping.original_url
