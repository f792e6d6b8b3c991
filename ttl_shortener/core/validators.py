"""
Input Validators and Sanitizers

This module provides validation and sanitization functions for user inputs.
The service layer calls these before anything reaches the database.

Security Considerations:
- Short codes are restricted to the generator alphabet before lookup
- Length limits prevent oversized rows and datetime overflow
"""

import math
import re
from numbers import Real
from typing import Optional

from ttl_shortener.core.exceptions import ValidationError

MAX_URL_LENGTH = 2048  # RFC 7230 practical limit
MAX_SHORT_CODE_LENGTH = 32

_SHORT_CODE_RE = re.compile(r'[A-Za-z0-9_-]+')


def sanitize_short_code(short_code: str) -> Optional[str]:
    """
    Sanitize and validate short code format.

    Short codes only contain URL-safe characters: [A-Za-z0-9_-]
    Anything else, surrounding whitespace included, could never have been
    generated, so callers treat it as not found without querying the database.
    The code is never rewritten: lookup stays an exact match.

    Args:
        short_code: The short code to sanitize

    Returns:
        The short code unchanged if valid, None otherwise
    """
    if not short_code or not isinstance(short_code, str):
        return None

    if len(short_code) > MAX_SHORT_CODE_LENGTH:
        return None

    if not _SHORT_CODE_RE.fullmatch(short_code):
        return None

    return short_code


def validate_url_length(url: str, max_length: int = MAX_URL_LENGTH) -> bool:
    """
    Validate URL length to prevent DoS attacks.

    Args:
        url: The URL to validate
        max_length: Maximum allowed length (default: 2048 per RFC 7230)

    Returns:
        True if URL length is valid, False otherwise
    """
    return bool(url) and len(url) <= max_length


def validate_original_url(original_url) -> str:
    """
    Check that the redirect target is a usable string.

    The URL is otherwise opaque: it is stored and redirected to as given.

    Raises:
        ValidationError: If the URL is missing, blank or too long
    """
    if original_url is None:
        raise ValidationError("originalUrl", "field is required")
    if not isinstance(original_url, str):
        raise ValidationError("originalUrl", "must be a string")

    original_url = original_url.strip()
    if not original_url:
        raise ValidationError("originalUrl", "must not be blank")
    if not validate_url_length(original_url):
        raise ValidationError("originalUrl", f"must be at most {MAX_URL_LENGTH} characters")

    return original_url


def validate_expire_in_hours(expire_in_hours, max_hours: float) -> float:
    """
    Check that the time-to-live is a finite number within +/- max_hours.

    Zero and negative values are accepted and produce a mapping that is
    already expired.

    Raises:
        ValidationError: If the value is missing, non-numeric, infinite or out of range
    """
    if expire_in_hours is None:
        raise ValidationError("expireInHours", "field is required")
    # bool is a Real subclass; "true" is not a duration
    if isinstance(expire_in_hours, bool) or not isinstance(expire_in_hours, Real):
        raise ValidationError("expireInHours", "must be a number")

    hours = float(expire_in_hours)
    if not math.isfinite(hours):
        raise ValidationError("expireInHours", "must be a finite number")
    if abs(hours) > max_hours:
        raise ValidationError("expireInHours", f"must be between -{max_hours:g} and {max_hours:g}")

    return hours
