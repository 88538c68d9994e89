"""
Poke Terminal: Cache Warming & Maintenance

Offline tooling that pre-populates the response cache under the same keys
the HTTP routes read, so the first dashboard visit after a deploy is a hit.

Warming order:
    1. Set catalog: every allow-listed set under ppt:set:{id}, plus the
       first page of ppt:sets for each common page size.
    2. Default card explorer query.
    3. Cards of the N most recently released sets.

Upstream calls go through BATCH_POLICY and are serialized with fixed
delays between them. The vendor gives no backpressure signal, so spacing
the calls is the only rate-limit protection. A FetchError after the policy's
last attempt aborts the run.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from dataclasses import dataclass, field

import structlog

from poketerminal.api.assembler import entity_envelope, paginated_envelope
from poketerminal.cache.keys import CARDS_PREFIX, CacheTTL, build_key, key_prefix, set_key, sets_key
from poketerminal.cache.store import CacheStore
from poketerminal.config import settings
from poketerminal.engine.adapter import transform_cards_response, transform_sets_response
from poketerminal.models.canonical import CanonicalSet
from poketerminal.pipeline.ppt import PPTClient, build_card_search_params

logger = structlog.get_logger(__name__)

# Card queries the dashboard issues on its landing pages
COMMON_CARD_QUERIES: tuple[dict[str, int], ...] = (
    {"page": 1, "page_size": 24},     # Card explorer default
    {"page": 1, "page_size": 20},     # Dashboard top cards
    {"page": 1, "page_size": 50},     # Screener / heatmap
)
SET_CARDS_PAGE_SIZE = 250


@dataclass
class WarmReport:
    """What a warming run wrote."""
    sets: int = 0
    card_queries: int = 0
    cards: int = 0
    keys_written: int = 0
    write_failures: int = 0


@dataclass
class ClearReport:
    """Keys found (and deleted unless dry run), grouped by prefix."""
    by_prefix: dict[str, int] = field(default_factory=dict)
    found: int = 0
    deleted: int = 0


def _parse_page_sizes(raw: str) -> list[int]:
    return [int(part) for part in raw.split(",") if part.strip()]


def _recent_first(sets: list[CanonicalSet]) -> list[CanonicalSet]:
    # releaseDate is YYYY/MM/DD, so string order is date order
    return sorted(sets, key=lambda s: s.releaseDate, reverse=True)


class CacheWarmer:
    """
    Populates the cache through a batch-policy PPTClient.

    Usage:
        async with PPTClient(policy=BATCH_POLICY) as client:
            report = await CacheWarmer(store, client).run()
    """

    def __init__(
        self,
        store: CacheStore,
        client: PPTClient,
        inter_call_delay: float | None = None,
        set_delay: float | None = None,
        recent_set_count: int | None = None,
        set_page_sizes: list[int] | None = None,
    ):
        self._store = store
        self._client = client
        self._inter_call_delay = (
            inter_call_delay if inter_call_delay is not None else settings.SEED_INTER_CALL_DELAY_SECONDS
        )
        self._set_delay = set_delay if set_delay is not None else settings.SEED_SET_DELAY_SECONDS
        self._recent_set_count = (
            recent_set_count if recent_set_count is not None else settings.SEED_RECENT_SET_COUNT
        )
        self._set_page_sizes = set_page_sizes or _parse_page_sizes(settings.SEED_SET_PAGE_SIZES)
        self.report = WarmReport()

    async def _write(self, key: str, value: dict, ttl: int) -> None:
        if await self._store.set(key, value, ttl):
            self.report.keys_written += 1
        else:
            self.report.write_failures += 1

    async def warm_sets(self) -> list[CanonicalSet]:
        """Fetch the catalog once and write list pages and per-set entries."""
        logger.info("warm_sets_begin")

        response = await self._client.fetch_sets()
        all_sets = transform_sets_response(response.data).data

        for page_size in self._set_page_sizes:
            envelope = paginated_envelope(all_sets, page=1, page_size=page_size)
            await self._write(sets_key(1, page_size), envelope, CacheTTL.SETS)

        for canonical in all_sets:
            await self._write(set_key(canonical.id), entity_envelope(canonical), CacheTTL.SET_DETAIL)

        self.report.sets = len(all_sets)
        logger.info("warm_sets_complete", sets=len(all_sets))
        return all_sets

    async def warm_card_query(self, params: dict[str, str]) -> int:
        """Fetch one card query and write it under the route's key."""
        response = await self._client.fetch_cards(params)
        envelope = transform_cards_response(response.data, response.metadata)
        await self._write(build_key(CARDS_PREFIX, params), envelope.to_json(), CacheTTL.CARDS)

        self.report.card_queries += 1
        self.report.cards += len(envelope.data)
        return len(envelope.data)

    async def warm_common_queries(self) -> None:
        logger.info("warm_common_queries_begin", queries=len(COMMON_CARD_QUERIES))
        for query in COMMON_CARD_QUERIES:
            params = build_card_search_params(page=query["page"], page_size=query["page_size"])
            count = await self.warm_card_query(params)
            logger.info("warm_common_query_cached", page_size=query["page_size"], cards=count)
            await asyncio.sleep(self._inter_call_delay)

    async def warm_recent_sets(self, sets: list[CanonicalSet]) -> None:
        recent = _recent_first(sets)[: self._recent_set_count]
        logger.info("warm_recent_sets_begin", sets=[s.id for s in recent])

        for canonical in recent:
            params = build_card_search_params(set_id=canonical.id, page=1, page_size=SET_CARDS_PAGE_SIZE)
            count = await self.warm_card_query(params)
            logger.info("warm_set_cards_cached", set_id=canonical.id, set_name=canonical.name, cards=count)
            await asyncio.sleep(self._set_delay)

    async def run(self, include_cards: bool = True) -> WarmReport:
        """
        Full warming run.

        Raises:
            FetchError: a vendor call failed on every attempt; the run is
                        aborted and keys already written stay cached.
        """
        logger.info("warm_run_begin", include_cards=include_cards)

        sets = await self.warm_sets()
        if include_cards:
            await asyncio.sleep(self._inter_call_delay)
            await self.warm_common_queries()
            await self.warm_recent_sets(sets)

        logger.info(
            "warm_run_complete",
            sets=self.report.sets,
            card_queries=self.report.card_queries,
            cards=self.report.cards,
            keys_written=self.report.keys_written,
            write_failures=self.report.write_failures,
        )
        return self.report


async def clear_cache(
    store: CacheStore,
    pattern: str = "*",
    dry_run: bool = False,
    batch_size: int | None = None,
) -> ClearReport:
    """
    Delete every key matching pattern in fixed-size batches.

    Args:
        store: Cache store to clear.
        pattern: Redis glob (e.g. "ppt:cards:*").
        dry_run: Only count keys per prefix.
        batch_size: Keys per DEL call.

    Returns:
        ClearReport with per-prefix counts.
    """
    batch_size = batch_size or settings.CLEAR_DELETE_BATCH_SIZE
    keys = await store.scan_keys(pattern)

    by_prefix: dict[str, int] = defaultdict(int)
    for key in keys:
        by_prefix[key_prefix(key)] += 1

    report = ClearReport(by_prefix=dict(by_prefix), found=len(keys))
    logger.info("cache_clear_scan", pattern=pattern, found=len(keys), by_prefix=report.by_prefix)

    if dry_run or not keys:
        return report

    for start in range(0, len(keys), batch_size):
        report.deleted += await store.delete(*keys[start:start + batch_size])

    logger.info("cache_clear_complete", pattern=pattern, deleted=report.deleted)
    return report
