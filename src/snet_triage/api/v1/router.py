"""
API v1 Router

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter

from snet_triage.api.v1.endpoints.appointments import router as appointments_router
from snet_triage.api.v1.endpoints.conversations import router as conversations_router
from snet_triage.api.v1.endpoints.health import router as health_router

api_router = APIRouter()

api_router.include_router(
    health_router,
    prefix="/health",
    tags=["Health"],
)

api_router.include_router(
    conversations_router,
    prefix="/conversations",
    tags=["Conversations"],
)

api_router.include_router(
    appointments_router,
    prefix="/appointments",
    tags=["Appointments"],
)
