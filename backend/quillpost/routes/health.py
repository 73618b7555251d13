"""
Quillpost Backend — Health Check Route
========================================

What:  Liveness endpoint for monitoring and load balancer probes.
How:   Reports version and uptime. The service has no hard dependencies
       to probe (the article store is in-process), so a response means healthy.
Who:   Called by Docker health checks, load balancers, and monitoring systems.

Policy:
    Public (no bearer token) and excluded from tenant resolution, so probes
    need no headers at all.
"""

import time

from fastapi import APIRouter

from quillpost import __version__
from quillpost.schemas.common import HealthResponse

router = APIRouter(tags=["Health"])

# Initialized once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    name="health_check",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
