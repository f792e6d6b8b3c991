"""
URL Shortening Service

This service is the facade over the url_mappings table:
- Validating creation input
- Generating a code and inserting the mapping, retrying on code collisions
- Exact-match lookup by short code

Design Decisions:
- Collision detection is delegated to the unique index on short_code: insert
  first, and on IntegrityError roll back and try a fresh code. A
  check-then-insert would race with concurrent creates.
- expires_at is computed once from the creation instant; rows are never
  updated afterwards
- Expiration is NOT evaluated here; lookups return the raw row and the
  redirect layer classifies it
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ttl_shortener.core.exceptions import CodeGenerationExhaustedError, StoreUnavailableError
from ttl_shortener.core.setting import settings
from ttl_shortener.core.validators import validate_expire_in_hours, validate_original_url
from ttl_shortener.db.models import UrlMapping
from ttl_shortener.services.code_generator import ShortCodeGenerator

logger = logging.getLogger(__name__)


class URLShorteningService:
    """
    Core business logic for creating and looking up URL mappings.

    Separated from API layer for testability; the session and the code
    generator are injected.
    """

    def __init__(
        self,
        session: AsyncSession,
        generator: Optional[ShortCodeGenerator] = None,
        max_retries: int = settings.MAX_COLLISION_RETRIES,
        max_expire_in_hours: float = settings.MAX_EXPIRE_IN_HOURS,
    ):
        """
        Args:
            session: Database session
            generator: Short code generator (defaults to SHORT_CODE_LENGTH codes)
            max_retries: Insert attempts before giving up on a unique code
            max_expire_in_hours: Largest accepted absolute expireInHours
        """
        self.session = session
        self.generator = generator or ShortCodeGenerator(settings.SHORT_CODE_LENGTH)
        self.max_retries = max_retries
        self.max_expire_in_hours = max_expire_in_hours

    async def create_short_url(
        self,
        original_url: str,
        expire_in_hours: float,
        now: Optional[datetime] = None,
    ) -> UrlMapping:
        """
        Create and persist a new mapping.

        Args:
            original_url: The redirect target (stored as given, minus surrounding whitespace)
            expire_in_hours: Time-to-live; zero or negative yields an already-expired mapping
            now: Creation instant (defaults to the current UTC time)

        Returns:
            The persisted UrlMapping

        Raises:
            ValidationError: If either field is missing or unusable
            CodeGenerationExhaustedError: If every attempt collided
            StoreUnavailableError: If the database operation fails
        """
        original_url = validate_original_url(original_url)
        hours = validate_expire_in_hours(expire_in_hours, self.max_expire_in_hours)

        created_at = now or datetime.now(timezone.utc)
        expires_at = created_at + timedelta(hours=hours)

        for attempt in range(1, self.max_retries + 1):
            short_code = self.generator.generate()
            mapping = UrlMapping(
                original_url=original_url,
                short_code=short_code,
                expires_at=expires_at,
                created_at=created_at,
            )
            self.session.add(mapping)

            try:
                await self.session.commit()
            except IntegrityError:
                await self.session.rollback()
                logger.warning(f"Short code collision on attempt {attempt}/{self.max_retries}: {short_code}")
                continue
            except SQLAlchemyError as e:
                await self.session.rollback()
                logger.error(f"Failed to persist mapping for {original_url}", exc_info=True)
                raise StoreUnavailableError("failed to create short URL", original_error=e) from e

            logger.info(f"Created short URL: {short_code} -> {original_url} (expires {expires_at.isoformat()})")
            return mapping

        logger.error(f"Gave up generating a unique short code for {original_url}")
        raise CodeGenerationExhaustedError(self.max_retries)

    async def get_mapping(self, short_code: str) -> Optional[UrlMapping]:
        """
        Retrieve the mapping for a given short code, expired or not.

        Args:
            short_code: The short code to look up

        Returns:
            UrlMapping if found, None otherwise

        Raises:
            StoreUnavailableError: If the query fails
        """
        statement = select(UrlMapping).where(UrlMapping.short_code == short_code)
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            logger.error(f"Lookup failed for {short_code}", exc_info=True)
            raise StoreUnavailableError("failed to look up short URL", original_error=e) from e
        return result.scalar_one_or_none()
