"""
Prometheus Metrics Endpoint.

Exposes /metrics for Prometheus scraping.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics", response_class=PlainTextResponse)
async def metrics():
    """
    Prometheus metrics endpoint.

    Example metrics:
    ```
    # HELP lookout_observations_total Completed observations
    # TYPE lookout_observations_total counter
    lookout_observations_total{name="user.name",error="none",userType="userType2",...} 3.0

    # HELP lookout_observations_active Observations started and not yet stopped
    # TYPE lookout_observations_active gauge
    lookout_observations_active{name="http.server.requests"} 1.0
    ```

    Returns:
        Prometheus text format metrics
    """
    return PlainTextResponse(generate_latest(), media_type=CONTENT_TYPE_LATEST)
