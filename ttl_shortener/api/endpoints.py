"""
FastAPI Endpoints for URL Shortener Service

This module defines the REST API endpoints with minimal logic.
Endpoints only handle:
- Request validation (Pydantic models)
- Rate limiting
- Error handling and HTTP responses
- Delegating to service layer

Design Principles:
- Thin endpoints: Only validation and rate limiting
- Service layer: All business logic
- Error handling: Proper HTTP status codes

Routes are registered by build_router() when an application is created, so
each app applies its own limiter and its own configured limits.
"""

import logging

from fastapi import APIRouter, Request, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse, RedirectResponse, Response
from slowapi import Limiter
from sqlalchemy.ext.asyncio import AsyncSession

from ttl_shortener.api.schemas import ShortenRequest, ShortenResponse
from ttl_shortener.core.exceptions import (
    ShortCodeNotFoundError,
    StoreUnavailableError,
    URLExpiredError,
    ValidationError,
)
from ttl_shortener.core.rate_limit import get_rate_limits
from ttl_shortener.core.setting import Settings
from ttl_shortener.core.validators import sanitize_short_code
from ttl_shortener.db.session import get_session
from ttl_shortener.services.code_generator import ShortCodeGenerator
from ttl_shortener.services.redirect_service import RedirectService, ResolveOutcome
from ttl_shortener.services.url_service import URLShorteningService

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "URL not found"
EXPIRED_MESSAGE = "This URL has expired"


def build_short_url(base_url: str, short_code: str) -> str:
    return f"{base_url.rstrip('/')}/{short_code}"


async def create_short_url(
    request: Request,  # Required for rate limiting (slowapi expects parameter named 'request')
    body: ShortenRequest,
    session: AsyncSession = Depends(get_session)
) -> ShortenResponse:
    """
    Create a new short URL.

    Returns:
        ShortenResponse with shortUrl and expiresAt

    Raises:
        HTTPException 400: If the request fields are unusable
        HTTPException 503: If the database fails or no unique code was found
    """
    config = request.app.state.settings

    url_service = URLShorteningService(
        session,
        generator=ShortCodeGenerator(config.SHORT_CODE_LENGTH),
        max_retries=config.MAX_COLLISION_RETRIES,
        max_expire_in_hours=config.MAX_EXPIRE_IN_HOURS,
    )

    try:
        mapping = await url_service.create_short_url(body.original_url, body.expire_in_hours)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except StoreUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e)
        )

    return ShortenResponse(
        short_url=build_short_url(config.BASE_URL, mapping.short_code),
        expires_at=mapping.expires_at,
    )


async def redirect_to_url(
    short_code: str,
    request: Request,
    session: AsyncSession = Depends(get_session)
) -> Response:
    """
    Redirect to the original URL for a given short code.

    The outcome is recorded on request.state for the access log.

    Returns:
        RedirectResponse (HTTP 302) to original URL, or a plain-text
        404 / 410 response

    Raises:
        HTTPException 503: If the database fails
    """
    sanitized_code = sanitize_short_code(short_code)
    if not sanitized_code:
        # Malformed codes can never have been issued
        request.state.resolve_outcome = ResolveOutcome.NOT_FOUND
        return PlainTextResponse(NOT_FOUND_MESSAGE, status_code=status.HTTP_404_NOT_FOUND)

    redirect_service = RedirectService(session)

    try:
        original_url = await redirect_service.get_redirect_url(sanitized_code)
    except ShortCodeNotFoundError:
        request.state.resolve_outcome = ResolveOutcome.NOT_FOUND
        return PlainTextResponse(NOT_FOUND_MESSAGE, status_code=status.HTTP_404_NOT_FOUND)
    except URLExpiredError:
        request.state.resolve_outcome = ResolveOutcome.EXPIRED
        return PlainTextResponse(EXPIRED_MESSAGE, status_code=status.HTTP_410_GONE)
    except StoreUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e)
        )

    request.state.resolve_outcome = ResolveOutcome.ACTIVE
    return RedirectResponse(
        url=original_url,
        status_code=status.HTTP_302_FOUND
    )


def build_router(config: Settings, limiter: Limiter) -> APIRouter:
    """
    Register the shortener routes under the given app's limiter.

    Args:
        config: Settings of the app being built (source of the limit strings)
        limiter: That app's Limiter, also stored on app.state.limiter
    """
    rate_limits = get_rate_limits(config)
    router = APIRouter()

    router.add_api_route(
        "/shorten",
        limiter.limit(rate_limits["shorten"])(create_short_url),
        methods=["POST"],
        response_model=ShortenResponse,
        status_code=status.HTTP_200_OK,
        summary="Create a short URL",
        description="Takes a long URL and a lifetime in hours and returns an expiring short URL"
    )

    router.add_api_route(
        "/{short_code}",
        limiter.limit(rate_limits["redirect"])(redirect_to_url),
        methods=["GET"],
        status_code=status.HTTP_302_FOUND,
        response_class=RedirectResponse,
        responses={
            404: {"description": NOT_FOUND_MESSAGE},
            410: {"description": EXPIRED_MESSAGE},
        },
        summary="Redirect to original URL",
        description="Takes a short code and redirects to the original URL unless it has expired"
    )

    return router
