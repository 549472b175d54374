"""
Health check endpoints.

Liveness reports the process is up; readiness checks the database and,
unless disabled, the text-generation provider.
"""

from typing import Any

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from chatline.db import verify_database_connection

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health_route() -> dict[str, Any]:
    return {"success": True, "status": "ok", "message": "Chat backend running"}


@router.get("/readyz")
async def readiness_route(request: Request) -> JSONResponse:
    """Report readiness; 503 when any dependency check fails."""
    checks: dict[str, bool] = {"database": verify_database_connection()}

    settings = request.app.state.settings
    if settings.readiness_check_provider:
        chat_service = getattr(request.app.state, "chat_service", None)
        if chat_service is None:
            checks["provider"] = False
        else:
            checks["provider"] = await chat_service.provider_client.provider.healthcheck()

    all_ready = all(checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if all_ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "success": all_ready,
            "status": "ready" if all_ready else "not_ready",
            "checks": checks,
        },
    )
