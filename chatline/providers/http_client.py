"""
Shared HTTP client helpers for provider adapters.

Provides consistent timeouts, retry behavior, and error mapping so provider
adapters raise stable ProviderError instances without leaking stack traces.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx

from chatline.core import (
    ProviderAuthError,
    ProviderBadResponseError,
    ProviderError,
    ProviderUnavailableError,
    get_logger,
    request_id_ctx,
)

logger = get_logger(__name__)

_NETWORK_ERRORS = (
    httpx.ConnectError,
    httpx.ReadTimeout,
    httpx.WriteTimeout,
    httpx.NetworkError,
    httpx.TimeoutException,
)


def create_http_client(
    base_url: str,
    timeout_seconds: float,
    headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Build an AsyncClient with consistent timeout settings.

    Args:
        base_url: Base URL for the provider.
        timeout_seconds: Timeout applied to every phase of a request.
        headers: Default headers to include.
        transport: Optional transport (used by tests with MockTransport).
    """
    timeout = httpx.Timeout(timeout_seconds)
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        timeout=timeout,
        headers=headers or {},
        transport=transport,
    )


async def request_with_retries(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    max_retries: int,
    **kwargs: Any,
) -> httpx.Response:
    """
    Execute an HTTP request with lightweight retries and mapped errors.

    Retries are only applied to network/timeout errors, not HTTP status codes.
    """
    headers = kwargs.pop("headers", {}) or {}
    request_id = request_id_ctx.get()
    if request_id and "X-Request-ID" not in headers:
        headers["X-Request-ID"] = request_id
    kwargs["headers"] = headers

    for attempt in range(max_retries + 1):
        try:
            return await client.request(method, url, **kwargs)
        except _NETWORK_ERRORS as exc:
            if attempt < max_retries:
                await asyncio.sleep(min(0.1 * (attempt + 1), 1.0))
                continue
            raise ProviderUnavailableError(
                "Provider unavailable", details={"reason": str(exc) or type(exc).__name__}
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(
                "Provider request failed", details={"reason": str(exc)}
            ) from exc

    # max_retries is never negative, so the loop always returns or raises
    raise ProviderUnavailableError("Provider unavailable")


def raise_for_status(response: httpx.Response) -> None:
    """
    Map HTTP status codes to ProviderError subclasses.
    """
    status = response.status_code
    if status < 400:
        return

    details = _safe_error_details(response)
    logger.warning("Provider HTTP error", data=details)

    if status in (401, 403):
        raise ProviderAuthError(details=details)
    if status == 429:
        raise ProviderUnavailableError("Provider rate limit exceeded", details=details)
    if status >= 500:
        raise ProviderUnavailableError("Provider unavailable", details=details)
    raise ProviderError("Provider error", details=details)


def parse_json(response: httpx.Response) -> Any:
    """
    Parse JSON with consistent error handling.
    """
    try:
        return response.json()
    except json.JSONDecodeError as exc:
        snippet = response.text[:500] if response.text else ""
        raise ProviderBadResponseError(
            "Provider returned invalid response",
            details={"body": snippet},
        ) from exc


def _safe_error_details(response: httpx.Response) -> dict[str, Any]:
    """Return a small, non-sensitive error payload for debugging."""
    return {
        "status": response.status_code,
        "body": response.text[:300] if response.text else "",
        "url": str(response.request.url),
    }
