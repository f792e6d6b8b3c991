"""URL shortener with caller-chosen expiration."""

__version__ = "1.0.0"
