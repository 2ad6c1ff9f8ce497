"""
Health Check Endpoints

System health and readiness for load balancers and probes.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from snet_triage import __version__
from snet_triage.api.runtime import TriageRuntime, get_runtime
from snet_triage.config import get_settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    environment: str


class ReadinessResponse(BaseModel):
    """Readiness check response with component health."""

    ready: bool
    components: dict


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
)
async def health_check() -> HealthResponse:
    """Returns 200 if the application is running."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=get_settings().env,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
)
async def readiness_check(runtime: TriageRuntime = Depends(get_runtime)) -> ReadinessResponse:
    """
    Component readiness.

    Ready when storage is reachable. The classifier backend is
    reported but not required: triage degrades to the default urgency.
    """
    components: dict = {}

    if runtime.db is not None:
        components["database"] = await runtime.db.health_check()
    else:
        components["database"] = True

    provider = runtime.classifier.provider
    components["llm_provider"] = provider.provider_name
    components["llm_configured"] = provider.is_configured()
    components["tracked_conversations"] = len(runtime.machine.tracked_conversations)

    return ReadinessResponse(
        ready=bool(components["database"]),
        components=components,
    )


@router.get(
    "/live",
    response_model=HealthResponse,
    summary="Liveness probe",
)
async def liveness_check() -> HealthResponse:
    return HealthResponse(
        status="alive",
        version=__version__,
        environment=get_settings().env,
    )
