"""
Run the URL shortener with uvicorn.

Usage:
    python -m ttl_shortener
    ttl-shortener

Environment variables: see ttl_shortener.core.setting.Settings
(HOST, PORT, DATABASE_URL, BASE_URL, LOG_LEVEL, ...).
"""

import uvicorn

from ttl_shortener.core.setting import settings


def main() -> None:
    uvicorn.run(
        "ttl_shortener.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
