"""
Liveness and readiness probes.
"""

from fastapi import APIRouter, Request

from speakercam.config import SERVICE_VERSION
from speakercam.schemas.responses import HealthResponse, ReadinessResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Liveness probe. Answers as long as the process serves requests."""
    return HealthResponse(status="healthy", version=SERVICE_VERSION)


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(request: Request):
    """
    Readiness probe.

    Not ready before startup has created the session store, or once every
    session slot is taken.
    """
    store = getattr(request.app.state, "session_store", None)
    if store is None:
        return ReadinessResponse(ready=False, active_sessions=0, max_sessions=0)

    active = len(store)
    return ReadinessResponse(
        ready=active < store.max_sessions,
        active_sessions=active,
        max_sessions=store.max_sessions,
    )
