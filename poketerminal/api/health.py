"""
Health check endpoints.

Provides liveness and readiness probes. The cache is reported but never
makes the service unready: a cache outage only means every request
recomputes.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from poketerminal.api.dependencies import get_cache_store
from poketerminal.cache.store import CacheStore

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    cache: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running.
    Does not check dependencies.
    """
    return HealthResponse(status="healthy")


@router.get("/ready", response_model=HealthResponse)
async def ready(
    cache: Annotated[CacheStore, Depends(get_cache_store)],
) -> HealthResponse:
    """Readiness probe with a cache PING."""
    connected = await cache.ping()
    return HealthResponse(
        status="ready",
        cache="connected" if connected else "disconnected",
    )
