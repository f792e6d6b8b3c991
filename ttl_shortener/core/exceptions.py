"""
Custom Exceptions

This module defines the error taxonomy of the shortener:
- ValidationError: creation input is missing or malformed (400)
- ShortCodeNotFoundError: no mapping for the code (404)
- URLExpiredError: mapping exists but is past its expiration (410)
- StoreUnavailableError: the database failed at the infrastructure level (503)
"""

from datetime import datetime
from typing import Optional


class URLShortenerException(Exception):
    """Base exception for URL shortener service."""
    pass


class ValidationError(URLShortenerException):
    """Raised when a creation request field is missing or unusable."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid '{field}': {reason}")


class ShortCodeNotFoundError(URLShortenerException):
    """Raised when a short code is not found in the database."""

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Short code '{short_code}' not found")


class URLExpiredError(URLShortenerException):
    """Raised when a short code resolves to an expired mapping."""

    def __init__(self, short_code: str, expires_at: datetime):
        self.short_code = short_code
        self.expires_at = expires_at
        super().__init__(f"Short code '{short_code}' expired at {expires_at.isoformat()}")


class StoreUnavailableError(URLShortenerException):
    """Raised when database operations fail."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")


class CodeGenerationExhaustedError(StoreUnavailableError):
    """Raised when every generated code collided with an existing mapping."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"failed to generate a unique short code after {attempts} attempts")
