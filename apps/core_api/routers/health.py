"""
Health Check Endpoints.

- GET /healthz: Liveness probe (API running)
- GET /readyz: Readiness probe (observation registry populated)
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from apps.core_api.deps import get_observation_registry
from lookout_core.registry import ObservationRegistry

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """
    Liveness probe - is the API process running?

    Returns 200 OK if server is alive.
    """
    return {"status": "healthy", "service": "lookout-api"}


@router.get("/readyz")
async def readyz(registry: ObservationRegistry = Depends(get_observation_registry)):
    """
    Readiness probe - is the API ready to serve traffic?

    Returns:
        200 OK once observation handlers are registered
        503 Service Unavailable otherwise
    """
    handlers = [type(h).__name__ for h in registry.handlers]
    if registry.is_noop:
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "checks": {"observation_handlers": "none"}},
        )

    return {
        "status": "ready",
        "checks": {"observation_handlers": handlers},
    }
