"""
Short Code Generator

Produces random, URL-safe short codes.

Design Decisions:
- Alphabet: [A-Za-z0-9_-], 64 symbols, safe in a URL path without escaping
- Randomness: `secrets` (OS CSPRNG), so codes are not guessable in sequence
- Stateless: uniqueness is enforced by the store's unique index, not here

Collision odds: 8 characters give 64^8 (about 2.8e14) codes. The service
retries on the rare conflict instead of checking for existence first, which
would race with concurrent inserts anyway.
"""

import secrets
import string
from typing import Optional

URL_SAFE_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits + "-_"
DEFAULT_CODE_LENGTH = 8

# Fixed GET routes matched ahead of /{short_code}; such a code could never resolve
RESERVED_CODES = frozenset({"docs", "redoc", "health"})


def generate_code(length: int = DEFAULT_CODE_LENGTH) -> str:
    """
    Generate a random short code.

    Args:
        length: Exact number of characters

    Returns:
        Code of `length` characters drawn uniformly from URL_SAFE_ALPHABET,
        never one of RESERVED_CODES

    Raises:
        ValueError: If length is not a positive integer
    """
    if isinstance(length, bool) or not isinstance(length, int) or length < 1:
        raise ValueError(f"Code length must be a positive integer, got {length!r}")
    while True:
        code = "".join(secrets.choice(URL_SAFE_ALPHABET) for _ in range(length))
        if code not in RESERVED_CODES:
            return code


class ShortCodeGenerator:
    """Generates codes of a configured default length."""

    def __init__(self, default_length: int = DEFAULT_CODE_LENGTH):
        self.default_length = default_length

    def generate(self, length: Optional[int] = None) -> str:
        if length is None:
            length = self.default_length
        return generate_code(length)
