"""
Shared FastAPI dependencies: the process-wide cache store and the
request-path vendor client, both owned by the application lifespan.
"""

from fastapi import Request

from poketerminal.cache.store import CacheStore
from poketerminal.pipeline.ppt import PPTClient


def get_cache_store(request: Request) -> CacheStore:
    """CacheStore created in the application lifespan."""
    return request.app.state.cache_store


def get_ppt_client(request: Request) -> PPTClient:
    """Fail-fast vendor client opened in the application lifespan."""
    return request.app.state.ppt_client
