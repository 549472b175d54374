"""Core module with errors, logging, middleware, and exception handling."""

from chatline.core.errors import (
    AppError,
    ErrorCode,
    ErrorResponse,
    NotFoundError,
    PersistenceError,
    ProviderAuthError,
    ProviderBadResponseError,
    ProviderError,
    ProviderUnavailableError,
    ValidationError,
)
from chatline.core.logging import get_logger, request_id_ctx, setup_logging
from chatline.core.middleware import RequestContextMiddleware, setup_exception_handlers

__all__ = [
    # Errors
    "AppError",
    "ErrorCode",
    "ErrorResponse",
    "NotFoundError",
    "PersistenceError",
    "ProviderAuthError",
    "ProviderBadResponseError",
    "ProviderError",
    "ProviderUnavailableError",
    "ValidationError",
    # Logging
    "get_logger",
    "request_id_ctx",
    "setup_logging",
    # Middleware
    "RequestContextMiddleware",
    "setup_exception_handlers",
]
