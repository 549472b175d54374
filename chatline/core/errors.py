"""
Structured error handling with stable error codes.

No stack traces are exposed to clients. Every failure is mapped to a
stable error code and rendered in the uniform response envelope.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes for API responses."""

    # General errors (1xxx)
    INTERNAL_ERROR = "E1000"
    VALIDATION_ERROR = "E1001"
    NOT_FOUND = "E1002"
    METHOD_NOT_ALLOWED = "E1003"

    # Persistence errors (3xxx)
    PERSISTENCE_ERROR = "E3000"

    # Provider errors (4xxx)
    PROVIDER_UNAVAILABLE = "E4000"
    PROVIDER_ERROR = "E4001"
    PROVIDER_BAD_RESPONSE = "E4004"
    PROVIDER_AUTH_FAILED = "E4005"

    # Resource errors (5xxx)
    SESSION_NOT_FOUND = "E5000"
    USER_NOT_FOUND = "E5002"


@dataclass(frozen=True)
class ErrorResponse:
    """Failure envelope.

    Format: {success: false, error, code, request_id?, details?}
    """

    code: ErrorCode
    message: str
    request_id: str | None = None
    details: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON response."""
        body: dict[str, Any] = {
            "success": False,
            "error": self.message,
            "code": self.code.value,
        }
        if self.request_id:
            body["request_id"] = self.request_id
        if self.details:
            body["details"] = self.details
        return body


class AppError(Exception):
    """Base application error with structured error detail."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)

    def to_response(self, request_id: str | None = None) -> ErrorResponse:
        """Create error response with request ID."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            request_id=request_id,
            details=self.details,
        )


class ValidationError(AppError):
    """Validation error (400)."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(ErrorCode.VALIDATION_ERROR, message, 400, details)


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self, message: str = "Resource not found", code: ErrorCode = ErrorCode.NOT_FOUND
    ):
        super().__init__(code, message, 404)


class PersistenceError(AppError):
    """Store unavailable or constraint violated (503)."""

    def __init__(
        self, message: str = "Persistence failure", details: dict[str, Any] | None = None
    ):
        super().__init__(ErrorCode.PERSISTENCE_ERROR, message, 503, details)


class ProviderError(AppError):
    """Provider error (502).

    Base for every failure of the external generation call.
    """

    def __init__(
        self,
        message: str = "Provider error",
        details: dict[str, Any] | None = None,
        *,
        code: ErrorCode = ErrorCode.PROVIDER_ERROR,
        status_code: int = 502,
    ):
        super().__init__(code, message, status_code, details)


class ProviderUnavailableError(ProviderError):
    """Provider unreachable or timed out (503)."""

    def __init__(
        self, message: str = "Provider unavailable", details: dict[str, Any] | None = None
    ):
        super().__init__(
            message, details, code=ErrorCode.PROVIDER_UNAVAILABLE, status_code=503
        )


class ProviderBadResponseError(ProviderError):
    """Provider returned malformed or empty response (502)."""

    def __init__(
        self,
        message: str = "Provider returned invalid response",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details, code=ErrorCode.PROVIDER_BAD_RESPONSE)


class ProviderAuthError(ProviderError):
    """Provider rejected our credentials (401/403 upstream)."""

    def __init__(
        self,
        message: str = "Provider authentication failed",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details, code=ErrorCode.PROVIDER_AUTH_FAILED)
