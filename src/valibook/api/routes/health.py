"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Request

from valibook import __version__
from valibook.api.models import HealthResponse
from valibook.utils.timing import get_latency_tracker

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint.

    Returns service status, project size and operation timings.
    """
    store = getattr(request.app.state, "store", None)
    latency = get_latency_tracker().get_stats()

    if store is None:
        return HealthResponse(
            status="degraded", version=__version__, project_loaded=False, latency=latency
        )
    return HealthResponse(
        status="healthy",
        version=__version__,
        project_loaded=True,
        num_tables=len(store.tables()),
        num_links=len(store.links()),
        latency=latency,
    )
