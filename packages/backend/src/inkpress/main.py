"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Everything request code needs (settings, token codec,
database) is built here once and stored on app.state; dependencies
read it from there. Lifespan handles schema creation and engine
shutdown.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inkpress import __version__
from inkpress.api import api_router
from inkpress.api.error_handlers import register_error_handlers
from inkpress.auth.jwt import TokenCodec
from inkpress.config import Settings, get_settings
from inkpress.db.engine import Database
from inkpress.log_config import configure_logging
from inkpress.middleware.request_id import RequestIdMiddleware
from inkpress.middleware.security import SecurityHeadersMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    settings: Settings = app.state.settings
    logger.info(
        "inkpress.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )
    if settings.create_schema:
        await app.state.db.create_all()

    yield

    logger.info("inkpress.shutdown")
    await app.state.db.dispose()


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    Raises pydantic.ValidationError if no settings are passed and the
    environment lacks INKPRESS_JWT_SECRET.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, json=settings.log_json)

    app = FastAPI(
        title="Inkpress",
        description="Minimal blogging API — public posts, author-only edits",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.token_codec = TokenCodec.from_settings(settings)
    app.state.db = database or Database(settings.database_url, echo=settings.debug)

    register_error_handlers(app)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RequestId → Security → handler
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)
    return app


# Default app instance (used by uvicorn: inkpress.main:app)
app = create_app()
