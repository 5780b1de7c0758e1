"""
Firenotes — Health Check Route
===============================

What:  Health check endpoint for monitoring and load balancer probes.
Why:   The app is only useful when both providers answer: the document store
       for every Home action, the identity provider for every auth action.
How:   Runs the lightweight health_check() of each backend.

Status levels:
    - healthy:   store and identity provider reachable (HTTP 200)
    - degraded:  identity provider unreachable; signed-in clients keep working
    - unhealthy: document store unreachable
"""

import logging
import time

from fastapi import APIRouter, Depends

from firenotes import __version__
from firenotes.deps import get_services
from firenotes.schemas.common import HealthResponse
from firenotes.services.container import AppServices

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(services: AppServices = Depends(get_services)) -> HealthResponse:
    store_status = "connected"
    identity_status = "available"
    overall = "healthy"

    # ── Check Document Store ──────────────────────────────────────────────
    if not await services.health_check_store():
        store_status = "disconnected"
        overall = "unhealthy"

    # ── Check Identity Provider ───────────────────────────────────────────
    if not await services.identity_provider.health_check():
        identity_status = "unavailable"
        overall = "degraded" if overall != "unhealthy" else overall

    return HealthResponse(
        status=overall,
        version=__version__,
        store_backend=services.config.store_backend,
        document_store=store_status,
        identity_provider=identity_status,
        active_clients=len(services.registry),
        uptime_seconds=round(time.time() - _start_time, 2),
    )
