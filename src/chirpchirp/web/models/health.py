"""Health check API response models."""

from typing import Any

from pydantic import BaseModel, Field


class ServiceStatusResponse(BaseModel):
    """Response for the root liveness endpoint."""

    status: str = Field(..., description="Service status (ok)")
    service: str = Field(..., description="Service name")


class LivenessProbeResponse(BaseModel):
    """Response for Kubernetes liveness probe."""

    status: str = Field(..., description="Liveness status (alive)")


class ReadinessProbeResponse(BaseModel):
    """Response for Kubernetes readiness probe."""

    status: str = Field(..., description="Readiness status (ready/not_ready)")
    checks: dict[str, Any] = Field(..., description="Component readiness checks")
    timestamp: str = Field(..., description="ISO timestamp of readiness check")
