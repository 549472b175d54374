"""
Application middleware and exception handlers.

Every failure leaves the API as the uniform ``{success: false, ...}``
envelope with an ``X-Request-ID`` header.
"""

import time
import uuid
from collections.abc import Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from chatline.core.errors import AppError, ErrorCode, ErrorResponse
from chatline.core.logging import get_logger, request_id_ctx

logger = get_logger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware to inject request ID and log request completion."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request_id_token = request_id_ctx.set(request_id)

        start_time = time.perf_counter()

        try:
            try:
                response = await call_next(request)
            except Exception as exc:
                # Build the 500 envelope while request_id_ctx is still set
                response = internal_error_response(request, exc)
            response.headers["X-Request-ID"] = request_id

            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "Request completed",
                data={
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                },
            )

            return response

        finally:
            request_id_ctx.reset(request_id_token)


def _envelope(error_response: ErrorResponse, status_code: int) -> JSONResponse:
    request_id = error_response.request_id
    return JSONResponse(
        status_code=status_code,
        content=error_response.to_dict(),
        headers={"X-Request-ID": request_id} if request_id else {},
    )


def internal_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Log an unexpected error and render it without exposing internals."""
    logger.error(
        "Unhandled exception",
        exc_info=exc,
        data={"path": request.url.path, "method": request.method},
    )
    error_response = ErrorResponse(
        code=ErrorCode.INTERNAL_ERROR,
        message="An unexpected error occurred",
        request_id=request_id_ctx.get(),
    )
    return _envelope(error_response, 500)


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure global exception handlers for the application."""
    from fastapi.exceptions import RequestValidationError
    from starlette.exceptions import HTTPException as StarletteHTTPException

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request body/path validation errors."""
        errors = exc.errors()
        message = "Validation error"
        if errors:
            first = errors[0]
            field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
        error_response = ErrorResponse(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            request_id=request_id_ctx.get(),
        )
        return _envelope(error_response, 422)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        _request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle HTTP exceptions (unknown routes, wrong methods)."""
        code_map = {
            404: ErrorCode.NOT_FOUND,
            405: ErrorCode.METHOD_NOT_ALLOWED,
        }
        error_response = ErrorResponse(
            code=code_map.get(exc.status_code, ErrorCode.INTERNAL_ERROR),
            message=str(exc.detail) if exc.detail else "HTTP error",
            request_id=request_id_ctx.get(),
        )
        return _envelope(error_response, exc.status_code)

    @app.exception_handler(AppError)
    async def app_error_handler(_request: Request, exc: AppError) -> JSONResponse:
        """Handle application errors."""
        logger.warning(
            f"Application error: {exc.message}",
            data={"code": exc.code.value, "details": exc.details},
        )
        return _envelope(exc.to_response(request_id=request_id_ctx.get()), exc.status_code)

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected errors raised outside the request middleware."""
        return internal_error_response(request, exc)
