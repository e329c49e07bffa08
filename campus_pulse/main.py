"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from campus_pulse.api import router
from campus_pulse.core.config import Settings, get_settings
from campus_pulse.core.database import Database
from campus_pulse.core.errors import register_exception_handlers
from campus_pulse.core.rate_limit import FixedWindowRateLimiter
from campus_pulse.services.media import ImageProcessor

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Open the connection pool on startup and release it on shutdown.

    The server stops accepting connections and drains in-flight requests
    before this context exits, so the pool outlives every request.
    """
    settings: Settings = app.state.settings
    database = Database(settings)
    if settings.DB_CREATE_ALL:
        database.create_all()
    app.state.database = database
    logger.info("Campus Pulse API started (env=%s)", settings.APP_ENV)
    try:
        yield
    finally:
        logger.info("Shutting down; closing database pool")
        database.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build an application instance with its own settings, pool, limiter and image processor."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Campus Pulse API",
        version="0.1.0",
        docs_url="/docs" if settings.APP_ENV == "dev" else None,
        redoc_url="/redoc" if settings.APP_ENV == "dev" else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.auth_rate_limiter = FixedWindowRateLimiter.for_auth(settings)
    app.state.image_processor = ImageProcessor(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOWED_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )
    register_exception_handlers(app)
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "campus_pulse.main:app",
        host=_settings.HOST,
        port=_settings.PORT,
        timeout_graceful_shutdown=_settings.SHUTDOWN_GRACE_SEC,
    )
