"""
FastAPI Application Entry Point

This module builds the FastAPI application and configures:
- API routes
- Middleware (logging, CORS)
- Rate limiting and error handlers
- The store client lifecycle

Design Decisions:
- create_app() takes explicit Settings so tests can build isolated apps
- Each app gets its own Limiter, and its routes carry the limits from its Settings
- The Database is constructed here, connected in the lifespan startup step
  before any request is served, and disposed on shutdown
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from ttl_shortener import __version__
from ttl_shortener.api import endpoints
from ttl_shortener.api.schemas import HealthResponse
from ttl_shortener.core.exceptions import StoreUnavailableError
from ttl_shortener.core.logging_config import setup_logging
from ttl_shortener.core.rate_limit import create_limiter
from ttl_shortener.core.setting import Settings, settings as default_settings
from ttl_shortener.db.session import Database
from ttl_shortener.middleware.logging import add_logging_middleware

logger = logging.getLogger(__name__)

VERSION = __version__


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect the store client before serving and dispose of it afterwards."""
    config: Settings = app.state.settings
    database: Database = app.state.database

    logger.info("Starting URL shortener service...")
    await database.connect(create_tables=config.AUTO_CREATE_TABLES)
    logger.info("Service started successfully")

    yield

    logger.info("Shutting down URL shortener service...")
    await database.disconnect()
    logger.info("Service stopped")


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are client errors, reported as 400."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


async def store_unavailable_handler(request: Request, exc: StoreUnavailableError) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc)},
    )


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """
    Build a FastAPI application bound to its own Database instance.

    Args:
        config: Settings to use (defaults to the environment-loaded settings)
    """
    config = config or default_settings
    setup_logging(level=config.LOG_LEVEL, json_format=config.LOG_JSON)

    app = FastAPI(
        title="URL Shortener Service",
        description="Short URLs with a caller-chosen lifetime",
        version=VERSION,
        docs_url="/docs",  # Swagger UI documentation
        redoc_url="/redoc",  # ReDoc documentation
        lifespan=lifespan,
    )

    app.state.settings = config
    app.state.database = Database(config.DATABASE_URL)

    app.state.limiter = create_limiter(config)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StoreUnavailableError, store_unavailable_handler)

    add_logging_middleware(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health endpoints defined before router to match before catch-all route
    @app.get("/", tags=["Health"])
    async def root():
        """Root endpoint for service identification."""
        return {
            "message": "URL Shortener Service",
            "version": VERSION,
            "docs": "/docs"
        }

    @app.get("/health", tags=["Health"], response_model=HealthResponse)
    async def health_check(request: Request):
        """
        Health check endpoint for monitoring.

        Pings the database; answers 503 when it is unreachable.
        """
        database_ok = await request.app.state.database.ping()
        body = HealthResponse(status="healthy" if database_ok else "unhealthy", database=database_ok)
        if not database_ok:
            return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body.model_dump())
        return body

    app.include_router(endpoints.build_router(config, app.state.limiter), tags=["URL Shortener"])

    return app


app = create_app()
