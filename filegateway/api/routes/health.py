"""
Health check endpoints.

We provide two endpoints:
- /health: Basic liveness check (is the process running?)
- /health/ready: Readiness check (is storage configured and reachable?)

Neither sits under /api, so both keep answering when storage is not
configured.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ...core.files.errors import FileGatewayError
from ..dependencies import SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    message: str
    timestamp: datetime


class ReadinessCheck(BaseModel):
    """Individual readiness check result."""
    name: str
    status: str  # "ok" or "error"
    error: Optional[str] = None


class ReadinessResponse(BaseModel):
    status: str  # "ready" or "not_ready"
    checks: list[ReadinessCheck]


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
    description="Returns 200 if the service is running. Does not check dependencies.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="OK",
        message="S3 File Manager API is running",
        timestamp=datetime.now(timezone.utc),
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Returns 200 if storage is configured and the bucket is reachable.",
    responses={503: {"description": "Service not ready", "model": ReadinessResponse}},
)
def readiness_check(request: Request, settings: SettingsDep):
    """
    Readiness check - can we serve traffic?

    Probes the bucket with HEAD, so this is slower than /health and
    should not be polled aggressively.
    """
    checks: list[ReadinessCheck] = []

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        checks.append(ReadinessCheck(
            name="configuration",
            status="error",
            error=f"Missing required fields: {', '.join(missing_fields)}",
        ))
    else:
        checks.append(ReadinessCheck(name="configuration", status="ok"))

    storage = request.app.state.storage
    if storage is None:
        checks.append(ReadinessCheck(name="storage", status="error", error="not configured"))
    else:
        try:
            storage.check_bucket()
            checks.append(ReadinessCheck(name="storage", status="ok"))
        except FileGatewayError as e:
            logger.error("Storage readiness check failed", extra={"error": str(e)})
            checks.append(ReadinessCheck(name="storage", status="error", error=str(e)))

    all_ok = all(check.status == "ok" for check in checks)
    response = ReadinessResponse(status="ready" if all_ok else "not_ready", checks=checks)

    if not all_ok:
        logger.warning(
            "Readiness check failed",
            extra={"checks": [c.model_dump() for c in checks]}
        )
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=response.model_dump(),
        )

    return response
