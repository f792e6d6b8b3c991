"""
Rate Limiting Configuration

This module provides rate limiting functionality for API endpoints.
Rate limiting prevents abuse and ensures fair usage.

Design Decisions:
- Uses slowapi for rate limiting (lightweight, FastAPI-compatible)
- Different limits for different endpoints, read from the app's Settings
- IP-based limiting
- One Limiter per application, so two apps never share counters or switches

Future Enhancement:
- Move to Redis-based storage so limits hold across worker processes
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from ttl_shortener.core.setting import Settings


def create_limiter(config: Settings) -> Limiter:
    """
    Build the rate limiter for one application.

    Counters live in the limiter's own in-memory storage.
    """
    return Limiter(key_func=get_remote_address, enabled=config.RATE_LIMIT_ENABLED)


def get_rate_limits(config: Settings) -> dict[str, str]:
    # Format: "count/period" (e.g., "10/minute" means 10 requests per minute)
    return {
        "shorten": config.RATE_LIMIT_SHORTEN,
        "redirect": config.RATE_LIMIT_REDIRECT,
    }
