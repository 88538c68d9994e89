"""
Card endpoints.

GET /api/cards       search with filters, vendor-side pagination
GET /api/cards/{id}  single card by TCGPlayer id, with price history
"""

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from poketerminal.api.assembler import NotFoundError, entity_envelope, error_response
from poketerminal.api.dependencies import get_cache_store, get_ppt_client
from poketerminal.cache.keys import CARDS_PREFIX, CacheTTL, build_key, card_key
from poketerminal.cache.store import CacheStore
from poketerminal.engine.adapter import transform_card, transform_cards_response
from poketerminal.pipeline.ppt import PPTClient, build_card_search_params

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/cards", tags=["cards"])

DEFAULT_PAGE_SIZE = 24


@router.get("", response_model=None)
async def list_cards(
    cache: Annotated[CacheStore, Depends(get_cache_store)],
    client: Annotated[PPTClient, Depends(get_ppt_client)],
    q: str | None = None,
    name: str | None = None,
    search: str | None = None,
    set_: Annotated[str | None, Query(alias="set")] = None,
    setId: str | None = None,
    rarity: str | None = None,
    types: str | None = None,
    cardType: str | None = None,
    minPrice: str | None = None,
    sortBy: str | None = None,
    sortOrder: str | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    pageSize: Annotated[int, Query(ge=1, le=250)] = DEFAULT_PAGE_SIZE,
) -> dict[str, Any] | JSONResponse:
    """
    Search cards.

    Query aliases: q/name/search, set/setId, types/cardType.
    """
    params = build_card_search_params(
        search=q or name or search,
        set_id=set_ or setId,
        rarity=rarity,
        card_type=types or cardType,
        min_price=minPrice,
        sort_by=sortBy,
        sort_order=sortOrder,
        page=page,
        page_size=pageSize,
    )
    key = build_key(CARDS_PREFIX, params)

    async def compute() -> dict[str, Any]:
        response = await client.fetch_cards(params)
        return transform_cards_response(response.data, response.metadata).to_json()

    try:
        return await cache.get_or_set(key, CacheTTL.CARDS, compute)
    except Exception:
        logger.exception("cards_fetch_failed", key=key)
        return error_response("Failed to fetch cards")


@router.get("/{card_id}", response_model=None)
async def get_card(
    card_id: str,
    cache: Annotated[CacheStore, Depends(get_cache_store)],
    client: Annotated[PPTClient, Depends(get_ppt_client)],
) -> dict[str, Any] | JSONResponse:
    """Single card by TCGPlayer id."""
    key = card_key(card_id)

    async def compute() -> dict[str, Any]:
        card = await client.fetch_card(card_id)
        if card is None:
            raise NotFoundError(f"Card {card_id} not found")
        return entity_envelope(transform_card(card))

    try:
        return await cache.get_or_set(key, CacheTTL.CARD_DETAIL, compute)
    except Exception:
        logger.exception("card_fetch_failed", card_id=card_id)
        return error_response("Failed to fetch card")
