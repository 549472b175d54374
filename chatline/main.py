"""
Chatline backend application.

FastAPI application with structured logging, uniform error envelopes,
and per-session serialized chat turns.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chatline import __version__
from chatline.api import auth_router, health_router, sessions_router
from chatline.config import Settings, get_settings
from chatline.core import (
    RequestContextMiddleware,
    get_logger,
    setup_exception_handlers,
    setup_logging,
)
from chatline.db import dispose_engine, init_database, reset_session_factory
from chatline.providers import build_provider_client
from chatline.services import ChatService

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings: Settings = _app.state.settings

    setup_logging(
        level=settings.log_level,
        json_output=settings.is_production,
        log_file=settings.log_file or None,
    )
    logger.info(
        "Starting chat backend",
        data={
            "host": settings.host,
            "port": settings.port,
            "debug": settings.debug,
            "model": settings.provider_model,
        },
    )

    if settings.auto_create_schema:
        init_database()

    # Provider client and chat service unless provided (useful in tests)
    client_created = False
    if not hasattr(_app.state, "chat_service"):
        provider_client = build_provider_client(settings)
        _app.state.chat_service = ChatService(provider_client)
        client_created = True

    if not settings.provider_api_key:
        logger.warning("PROVIDER_API_KEY is not set - provider calls will likely fail")

    yield

    logger.info("Shutting down chat backend")
    if client_created:
        await _app.state.chat_service.provider_client.aclose()
    dispose_engine()
    reset_session_factory()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Chatline",
        description="Multi-session chat backend with durable history",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.settings = settings

    setup_exception_handlers(app)

    # Order matters - last added = first executed
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(sessions_router)

    return app


def run() -> None:
    """Console entry point."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("chatline.main:create_app", factory=True, host=settings.host, port=settings.port)
