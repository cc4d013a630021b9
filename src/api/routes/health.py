"""
Health check endpoints.

We provide two endpoints:
- /health: Basic liveness check (is the process running?)
- /health/ready: Readiness check (can we serve traffic?)

The distinction matters in orchestration systems like Kubernetes
where liveness and readiness have different behaviors.
"""

import logging
import os
from typing import Any

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from ... import __version__
from ..dependencies import SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """
    Health check response.

    Standardized format makes it easy for monitoring tools to parse.
    """
    status: str
    version: str
    details: dict[str, Any] = {}


class ReadinessCheck(BaseModel):
    """Individual readiness check result."""
    name: str
    status: str  # "ok" or "error"
    error: str | None = None
    detail: str | None = None


class ReadinessResponse(BaseModel):
    """Readiness check response with details."""
    status: str  # "ready" or "not_ready"
    version: str
    checks: list[ReadinessCheck]


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
    description="Returns 200 if the service is running. Does not check dependencies.",
)
async def health_check(settings: SettingsDep) -> HealthResponse:
    """
    Liveness check - is the process alive?

    This endpoint should be very fast and not check external dependencies.
    """
    return HealthResponse(
        status="ok",
        version=__version__,
        details={
            "remote_storage": settings.aws_creds_exist,
            "mock_mode": {"s3": settings.s3_mock_mode},
        }
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
    description="Returns 200 if the service can handle traffic. Checks configuration and storage.",
    responses={
        503: {
            "description": "Service not ready",
            "model": ReadinessResponse,
        }
    },
)
async def readiness_check(
    settings: SettingsDep,
    response: Response,
) -> ReadinessResponse:
    """
    Readiness check - can we serve traffic?

    Remote storage is optional, so running without S3 credentials is still
    "ready". A partial S3 configuration or an unusable upload directory is
    not. Returns 503 if any check fails.
    """
    checks: list[ReadinessCheck] = []
    all_ok = True

    # Check configuration
    missing_fields = settings.validate_required_fields()
    if missing_fields:
        checks.append(ReadinessCheck(
            name="configuration",
            status="error",
            error=f"Missing required fields: {', '.join(missing_fields)}"
        ))
        all_ok = False
    else:
        checks.append(ReadinessCheck(
            name="configuration",
            status="ok"
        ))

    # Remote storage
    if settings.s3_mock_mode:
        checks.append(ReadinessCheck(
            name="remote_storage",
            status="ok",
            detail="mock mode"
        ))
    elif settings.aws_creds_exist:
        checks.append(ReadinessCheck(
            name="remote_storage",
            status="ok"
        ))
    else:
        checks.append(ReadinessCheck(
            name="remote_storage",
            status="ok",
            detail="not configured, using local disk"
        ))

    # Local uploads must be writable, they are the fallback for every upload
    upload_root = settings.local_upload_root
    if os.path.isdir(upload_root) and not os.access(upload_root, os.W_OK):
        checks.append(ReadinessCheck(
            name="local_storage",
            status="error",
            error=f"Upload root is not writable: {upload_root}"
        ))
        all_ok = False
    else:
        checks.append(ReadinessCheck(
            name="local_storage",
            status="ok"
        ))

    if not all_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning(
            "Readiness check failed",
            extra={
                "checks": [
                    {"name": c.name, "status": c.status, "error": c.error}
                    for c in checks
                ]
            }
        )

    return ReadinessResponse(
        status="ready" if all_ok else "not_ready",
        version=__version__,
        checks=checks
    )
