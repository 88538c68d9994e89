"""
Set endpoints.

GET /api/sets       allow-listed sets, paginated locally
GET /api/sets/{id}  single set by vendor slug or vendor id

The vendor returns the whole catalog in one call, so pagination happens
after the allow-list filter and counts reflect the filtered list.
"""

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from poketerminal.api.assembler import (
    NotFoundError,
    entity_envelope,
    error_response,
    paginated_envelope,
)
from poketerminal.api.dependencies import get_cache_store, get_ppt_client
from poketerminal.cache.keys import CacheTTL, set_key, sets_key
from poketerminal.cache.store import CacheStore
from poketerminal.engine.adapter import transform_set, transform_sets_response
from poketerminal.pipeline.ppt import PPTClient
from poketerminal.utils.set_identity import should_include

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/sets", tags=["sets"])

DEFAULT_PAGE_SIZE = 100


@router.get("", response_model=None)
async def list_sets(
    cache: Annotated[CacheStore, Depends(get_cache_store)],
    client: Annotated[PPTClient, Depends(get_ppt_client)],
    page: Annotated[int, Query(ge=1)] = 1,
    pageSize: Annotated[int, Query(ge=1)] = DEFAULT_PAGE_SIZE,
) -> dict[str, Any] | JSONResponse:
    key = sets_key(page, pageSize)

    async def compute() -> dict[str, Any]:
        response = await client.fetch_sets()
        all_sets = transform_sets_response(response.data)
        return paginated_envelope(all_sets.data, page=page, page_size=pageSize)

    try:
        return await cache.get_or_set(key, CacheTTL.SETS, compute)
    except Exception:
        logger.exception("sets_fetch_failed", key=key)
        return error_response("Failed to fetch sets")


@router.get("/{set_id}", response_model=None)
async def get_set(
    set_id: str,
    cache: Annotated[CacheStore, Depends(get_cache_store)],
    client: Annotated[PPTClient, Depends(get_ppt_client)],
) -> dict[str, Any] | JSONResponse:
    """
    Single set, matched by vendor slug or by the vendor's internal id.
    Sets outside the allow-list are reported as not found.
    """
    key = set_key(set_id)

    async def compute() -> dict[str, Any]:
        response = await client.fetch_sets()
        match = next(
            (s for s in response.data if s.tcgPlayerId == set_id or s.id == set_id),
            None,
        )
        if match is None or not should_include(match.name):
            raise NotFoundError(f"Set {set_id} not found")
        return entity_envelope(transform_set(match))

    try:
        return await cache.get_or_set(key, CacheTTL.SET_DETAIL, compute)
    except Exception:
        logger.exception("set_fetch_failed", set_id=set_id)
        return error_response("Failed to fetch set")
