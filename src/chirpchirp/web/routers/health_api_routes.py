"""Health check endpoints for monitoring service status."""

import logging
from datetime import UTC, datetime
from typing import Annotated

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Response, status

from chirpchirp.config import ChirpConfig
from chirpchirp.database.core import CoreDatabaseService
from chirpchirp.web.core.container import Container
from chirpchirp.web.models.health import (
    LivenessProbeResponse,
    ReadinessProbeResponse,
    ServiceStatusResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=ServiceStatusResponse)
@inject
async def service_status(
    config: Annotated[ChirpConfig, Depends(Provide[Container.config])],
) -> ServiceStatusResponse:
    """Report that the service is up. Does not touch the database."""
    return ServiceStatusResponse(status="ok", service=config.service_name)


@router.get("/health/live", response_model=LivenessProbeResponse)
async def liveness_probe() -> LivenessProbeResponse:
    """Kubernetes-style liveness probe."""
    return LivenessProbeResponse(status="alive")


@router.get("/health/ready", response_model=ReadinessProbeResponse)
@inject
async def readiness_probe(
    core_database: Annotated[CoreDatabaseService, Depends(Provide[Container.core_database])],
    response: Response,
) -> ReadinessProbeResponse:
    """Check if the service can reach its database.

    Returns:
        Readiness status with component checks; HTTP 503 when not ready.
    """
    database_ok = await core_database.ping()
    if not database_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessProbeResponse(
        status="ready" if database_ok else "not_ready",
        checks={"database": database_ok},
        timestamp=datetime.now(UTC).isoformat(),
    )
