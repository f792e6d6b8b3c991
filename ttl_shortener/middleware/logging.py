"""
Access Logging Middleware

Writes one line per request to the "ttl_shortener.access" logger, so it
follows the handlers and format installed by setup_logging().

Each line carries:
- A request id (taken from X-Request-ID or generated), echoed back in the response
- Method, path, status and processing time
- The resolve outcome (active / expired / not_found) for short-code lookups
- Client IP address

The level follows the result: a redirect is INFO, an expired or unknown
code is WARNING along with other client errors, and 5xx is ERROR.
"""

import logging
import time
import uuid

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128

logger = logging.getLogger("ttl_shortener.access")


def level_for_status(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class AccessLogMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next):
        request_id = self._get_request_id(request)
        request.state.request_id = request_id
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time = time.perf_counter() - start_time

        message = (
            f"[{request_id}] {request.method} {request.url.path} "
            f"{response.status_code} {process_time*1000:.2f}ms "
            f"IP:{self._get_client_ip(request)}"
        )
        outcome = getattr(request.state, "resolve_outcome", None)
        if outcome is not None:
            message += f" outcome={outcome.value}"
        logger.log(level_for_status(response.status_code), message)

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = str(process_time)

        return response

    def _get_request_id(self, request: Request) -> str:
        incoming = request.headers.get(REQUEST_ID_HEADER, "").strip()
        if incoming and len(incoming) <= MAX_REQUEST_ID_LENGTH and incoming.isprintable():
            return incoming
        return uuid.uuid4().hex

    def _get_client_ip(self, request: Request) -> str:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            # X-Forwarded-For can contain multiple IPs, take the first one
            return forwarded_for.split(",")[0].strip()

        return request.client.host if request.client else "unknown"


def add_logging_middleware(app: FastAPI) -> None:
    app.add_middleware(AccessLogMiddleware)
