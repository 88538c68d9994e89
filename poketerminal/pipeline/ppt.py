"""
Poke Terminal: PokemonPriceTracker API Client

Fetches card and set data from the PokemonPriceTracker v2 API.

Two fetch policies coexist:
- REQUEST_PATH_POLICY: used while a user waits on a cache miss. One attempt,
  hard timeout, any non-2xx or timeout raises FetchError immediately.
- BATCH_POLICY: used by the cache warmer only. Bounded retries with
  exponential backoff plus jitter, capped delay, a timeout per attempt, and
  FetchError after the last attempt.

Base URL: https://www.pokemonpricetracker.com/api/v2
The vendor rejects unfiltered card queries: at least one of set, rarity,
cardType or minPrice must be present.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from poketerminal.config import settings
from poketerminal.models.vendor import VendorCard, VendorCardsResponse, VendorSetsResponse

logger = structlog.get_logger(__name__)

DEFAULT_SORT_BY = "price"
DEFAULT_SORT_ORDER = "desc"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class FetchError(Exception):
    """The vendor call failed: non-2xx status, transport error or timeout."""

    def __init__(
        self,
        message: str,
        path: str,
        status_code: int | None = None,
        attempts: int = 1,
    ):
        super().__init__(message)
        self.path = path
        self.status_code = status_code
        self.attempts = attempts


# ---------------------------------------------------------------------------
# Fetch policies
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FetchPolicy:
    """Retry/timeout policy for one usage profile."""
    name: str
    max_attempts: int
    timeout_seconds: float
    base_delay_seconds: float = 0.0
    backoff_factor: float = 1.0
    max_delay_seconds: float = 0.0
    jitter_seconds: float = 0.0

    def delay_for(self, attempt: int) -> float:
        """
        Seconds to wait after a failed attempt (0-based).

        min(max_delay, base * factor ** attempt) + uniform(0, jitter)
        """
        backoff = min(
            self.max_delay_seconds,
            self.base_delay_seconds * (self.backoff_factor ** attempt),
        )
        return backoff + random.uniform(0, self.jitter_seconds)


REQUEST_PATH_POLICY = FetchPolicy(
    name="request_path",
    max_attempts=1,
    timeout_seconds=settings.PPT_REQUEST_TIMEOUT_SECONDS,
)

BATCH_POLICY = FetchPolicy(
    name="batch",
    max_attempts=settings.PPT_BATCH_MAX_ATTEMPTS,
    timeout_seconds=settings.PPT_BATCH_TIMEOUT_SECONDS,
    base_delay_seconds=settings.PPT_BATCH_BASE_DELAY_SECONDS,
    backoff_factor=settings.PPT_BATCH_BACKOFF_FACTOR,
    max_delay_seconds=settings.PPT_BATCH_MAX_DELAY_SECONDS,
    jitter_seconds=settings.PPT_BATCH_JITTER_SECONDS,
)


# ---------------------------------------------------------------------------
# Query construction
# ---------------------------------------------------------------------------


def build_card_search_params(
    search: str | None = None,
    set_id: str | None = None,
    rarity: str | None = None,
    card_type: str | None = None,
    min_price: str | None = None,
    sort_by: str | None = None,
    sort_order: str | None = None,
    page: int = 1,
    page_size: int = 24,
) -> dict[str, str]:
    """
    Map dashboard filters to vendor /cards query parameters.

    Shared by the HTTP route and the cache warmer, so both produce the same
    cache key for the same query.

    Returns:
        Ordered vendor params: filters, limit/offset, history flags, the
        permissive minPrice=0 when no vendor filter was given, and the
        default price-descending sort.
    """
    params: dict[str, str] = {}

    if search:
        params["search"] = search
    if set_id:
        params["set"] = set_id
    if rarity:
        params["rarity"] = rarity
    if card_type:
        params["cardType"] = card_type
    if min_price:
        params["minPrice"] = min_price
    if sort_by:
        params["sortBy"] = sort_by
    if sort_order:
        params["sortOrder"] = sort_order

    page = max(page, 1)
    page_size = max(page_size, 1)
    params["limit"] = str(page_size)
    params["offset"] = str((page - 1) * page_size)

    # Real price history drives priceChange
    params["includeHistory"] = "true"
    params["days"] = str(settings.PPT_HISTORY_DAYS)

    if not (set_id or rarity or card_type or min_price):
        params["minPrice"] = "0"

    if not sort_by:
        params["sortBy"] = DEFAULT_SORT_BY
        params["sortOrder"] = DEFAULT_SORT_ORDER

    return params


# ---------------------------------------------------------------------------
# API Client
# ---------------------------------------------------------------------------


class PPTClient:
    """
    Async client for the PokemonPriceTracker v2 API.

    Usage:
        async with PPTClient() as client:
            response = await client.fetch_cards({"set": "sv04-paradox-rift"})

        async with PPTClient(policy=BATCH_POLICY) as client:
            sets = await client.fetch_sets()
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        policy: FetchPolicy = REQUEST_PATH_POLICY,
    ):
        self._api_key = api_key if api_key is not None else settings.PPT_API_KEY
        self._base_url = base_url or settings.PPT_BASE_URL
        self._policy = policy
        self._client: httpx.AsyncClient | None = None

    @property
    def policy(self) -> FetchPolicy:
        return self._policy

    async def __aenter__(self) -> PPTClient:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=headers,
            timeout=self._policy.timeout_seconds,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        GET path under the client's policy.

        Raises:
            FetchError: after the policy's last failed attempt.
        """
        assert self._client is not None, "Client not initialized. Use 'async with'."

        policy = self._policy
        status_code: int | None = None
        last_error: Exception | None = None

        for attempt in range(policy.max_attempts):
            try:
                response = await asyncio.wait_for(
                    self._client.get(path, params=params),
                    timeout=policy.timeout_seconds,
                )
                response.raise_for_status()
                return response.json()

            except httpx.HTTPStatusError as e:
                last_error = e
                status_code = e.response.status_code
                logger.error(
                    "ppt_http_error",
                    status_code=status_code,
                    attempt=attempt + 1,
                    max_attempts=policy.max_attempts,
                    path=path,
                    policy=policy.name,
                )

            except (httpx.RequestError, asyncio.TimeoutError, ValueError) as e:
                # ValueError: body was not JSON
                last_error = e
                status_code = None
                logger.error(
                    "ppt_request_error",
                    error=str(e) or type(e).__name__,
                    attempt=attempt + 1,
                    max_attempts=policy.max_attempts,
                    path=path,
                    policy=policy.name,
                )

            if attempt + 1 < policy.max_attempts:
                wait_time = policy.delay_for(attempt)
                logger.warning(
                    "ppt_retry_scheduled",
                    attempt=attempt + 1,
                    wait_seconds=round(wait_time, 2),
                    path=path,
                )
                await asyncio.sleep(wait_time)

        raise FetchError(
            f"PokemonPriceTracker request {path} failed after {policy.max_attempts} attempt(s)",
            path=path,
            status_code=status_code,
            attempts=policy.max_attempts,
        ) from last_error

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    async def fetch_cards(self, params: dict[str, str]) -> VendorCardsResponse:
        """
        Search cards.

        Args:
            params: Vendor query params, usually from build_card_search_params.

        Returns:
            VendorCardsResponse with the page of cards and metadata.
        """
        logger.info("ppt_fetch_cards", params=params)

        data = await self._request("/cards", params=params)
        response = VendorCardsResponse.model_validate(data)

        logger.info(
            "ppt_fetch_cards_complete",
            count=len(response.data),
            total=response.metadata.total if response.metadata else None,
        )
        return response

    async def fetch_card(self, tcg_player_id: str) -> VendorCard | None:
        """
        Look up one card by TCGPlayer id, with price history.

        The vendor returns data as an object for id lookups and as a list
        for searches; both are accepted.

        Returns:
            The card, or None when the vendor had no match.
        """
        logger.info("ppt_fetch_card", card_id=tcg_player_id)

        data = await self._request(
            "/cards",
            params={
                "tcgPlayerId": tcg_player_id,
                "includeHistory": "true",
                "days": str(settings.PPT_HISTORY_DAYS),
            },
        )

        raw = data.get("data") if isinstance(data, dict) else None
        if isinstance(raw, list):
            raw = raw[0] if raw else None
        if not raw:
            logger.info("ppt_fetch_card_empty", card_id=tcg_player_id)
            return None

        return VendorCard.model_validate(raw)

    async def fetch_sets(self, limit: int | None = None) -> VendorSetsResponse:
        """Fetch the vendor's set catalog (unfiltered)."""
        limit = limit or settings.PPT_SETS_LIMIT
        logger.info("ppt_fetch_sets", limit=limit)

        data = await self._request("/sets", params={"limit": limit})
        response = VendorSetsResponse.model_validate(data)

        logger.info("ppt_fetch_sets_complete", count=len(response.data))
        return response
