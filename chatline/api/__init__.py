"""API routers."""

from chatline.api.auth import router as auth_router
from chatline.api.health import router as health_router
from chatline.api.sessions import router as sessions_router

__all__ = [
    "auth_router",
    "health_router",
    "sessions_router",
]
