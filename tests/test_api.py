"""
Tests for the HTTP surface (poketerminal/api/*).

The vendor client is replaced with AsyncMocks and the cache store runs over
the in-memory backend from conftest, via FastAPI dependency overrides.
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError

from poketerminal.api.dependencies import get_cache_store, get_ppt_client
from poketerminal.cache.keys import CARDS_PREFIX, build_key, card_key
from poketerminal.cache.store import CacheStore
from poketerminal.main import app, lifespan
from poketerminal.pipeline.ppt import FetchError, PPTClient, build_card_search_params


@pytest.fixture
def ppt_client(vendor_cards, vendor_sets) -> MagicMock:
    client = MagicMock(spec=PPTClient)
    client.fetch_cards = AsyncMock(return_value=vendor_cards)
    client.fetch_card = AsyncMock(return_value=vendor_cards.data[0])
    client.fetch_sets = AsyncMock(return_value=vendor_sets)
    return client


@pytest_asyncio.fixture
async def api(cache_store, ppt_client):
    """Async test client with the cache store and vendor client overridden."""
    app.dependency_overrides[get_cache_store] = lambda: cache_store
    app.dependency_overrides[get_ppt_client] = lambda: ppt_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Cards
# ---------------------------------------------------------------------------


class TestCards:

    @pytest.mark.asyncio
    async def test_list_cards(self, api, ppt_client) -> None:
        response = await api.get("/api/cards")

        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]) == 3
        assert body["page"] == 3
        assert body["totalCount"] == 57
        assert body["data"][0]["name"] == "Iron Valiant ex"

        params = ppt_client.fetch_cards.await_args.args[0]
        assert params == build_card_search_params()

    @pytest.mark.asyncio
    async def test_query_aliases(self, api, ppt_client) -> None:
        await api.get("/api/cards", params={"q": "Pikachu", "setId": "sv04-paradox-rift", "types": "Lightning"})

        params = ppt_client.fetch_cards.await_args.args[0]
        assert params["search"] == "Pikachu"
        assert params["set"] == "sv04-paradox-rift"
        assert params["cardType"] == "Lightning"
        assert "minPrice" not in params

    @pytest.mark.asyncio
    async def test_pagination_maps_to_offset(self, api, ppt_client) -> None:
        await api.get("/api/cards", params={"set": "base-set", "page": 2, "pageSize": 50})

        params = ppt_client.fetch_cards.await_args.args[0]
        assert params["limit"] == "50"
        assert params["offset"] == "50"

    @pytest.mark.asyncio
    async def test_cache_hit_skips_vendor(self, api, ppt_client, redis_backend) -> None:
        key = build_key(CARDS_PREFIX, build_card_search_params())
        cached = {"data": [], "page": 1, "pageSize": 24, "count": 0, "totalCount": 0}
        redis_backend.data[key] = json.dumps(cached)

        response = await api.get("/api/cards")

        assert response.json() == cached
        ppt_client.fetch_cards.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_vendor_failure_is_fixed_500(self, api, ppt_client) -> None:
        ppt_client.fetch_cards.side_effect = FetchError("upstream 503", path="/cards", status_code=503)

        response = await api.get("/api/cards")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch cards"}

    @pytest.mark.asyncio
    async def test_invalid_page_size(self, api) -> None:
        assert (await api.get("/api/cards", params={"pageSize": 0})).status_code == 422

    @pytest.mark.asyncio
    async def test_get_card(self, api, ppt_client) -> None:
        response = await api.get("/api/cards/246723")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == "246723"
        assert data["priceChange"] == pytest.approx(20.0)
        ppt_client.fetch_card.assert_awaited_once_with("246723")

    @pytest.mark.asyncio
    async def test_get_card_cache_hit(self, api, ppt_client, redis_backend) -> None:
        redis_backend.data[card_key("1")] = json.dumps({"data": {"id": "1"}})

        assert (await api.get("/api/cards/1")).json() == {"data": {"id": "1"}}
        ppt_client.fetch_card.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_card_is_500(self, api, ppt_client) -> None:
        ppt_client.fetch_card.return_value = None

        response = await api.get("/api/cards/0")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch card"}


# ---------------------------------------------------------------------------
# Sets
# ---------------------------------------------------------------------------


class TestSets:

    @pytest.mark.asyncio
    async def test_list_sets_counts_filtered(self, api) -> None:
        body = (await api.get("/api/sets")).json()

        assert body["totalCount"] == 4
        assert body["count"] == 4
        assert body["pageSize"] == 100
        assert "Some Unlisted Regional Promo" not in [s["name"] for s in body["data"]]

    @pytest.mark.asyncio
    async def test_list_sets_local_pagination(self, api) -> None:
        body = (await api.get("/api/sets", params={"page": 2, "pageSize": 2})).json()

        assert [s["id"] for s in body["data"]] == ["me02-phantasmal-flames", "sv08-surging-sparks"]
        assert body["page"] == 2
        assert body["count"] == 2
        assert body["totalCount"] == 4

    @pytest.mark.asyncio
    async def test_page_past_end_is_empty(self, api) -> None:
        body = (await api.get("/api/sets", params={"page": 9, "pageSize": 2})).json()

        assert body["data"] == []
        assert body["count"] == 0
        assert body["totalCount"] == 4

    @pytest.mark.asyncio
    async def test_get_set_by_slug(self, api) -> None:
        data = (await api.get("/api/sets/base-set")).json()["data"]

        assert data["name"] == "Base Set"
        assert data["series"] == "Base Set"
        assert data["images"]["logo"] == "https://images.pokemontcg.io/base1/logo.png"

    @pytest.mark.asyncio
    async def test_get_set_by_vendor_id(self, api) -> None:
        data = (await api.get("/api/sets/650a1c2e9f1b2a0012a1b001")).json()["data"]
        assert data["id"] == "sv04-paradox-rift"

    @pytest.mark.asyncio
    async def test_excluded_set_is_not_found(self, api) -> None:
        response = await api.get("/api/sets/unlisted-regional-promo")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch set"}

    @pytest.mark.asyncio
    async def test_vendor_failure(self, api, ppt_client) -> None:
        ppt_client.fetch_sets.side_effect = FetchError("timeout", path="/sets")

        response = await api.get("/api/sets")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch sets"}


# ---------------------------------------------------------------------------
# Types & health
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_types(api) -> None:
    response = await api.get("/api/types")

    assert response.status_code == 200
    assert len(response.json()["data"]) == 11
    assert "Lightning" in response.json()["data"]
    assert response.headers["Cache-Control"] == "public, max-age=604800"


@pytest.mark.asyncio
async def test_health(api) -> None:
    assert (await api.get("/health")).json() == {"status": "healthy", "cache": None}


@pytest.mark.asyncio
async def test_ready(api) -> None:
    assert (await api.get("/ready")).json() == {"status": "ready", "cache": "connected"}


# ---------------------------------------------------------------------------
# Cache outage
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_cache_outage_still_serves(ppt_client) -> None:
    backend = AsyncMock()
    backend.get.side_effect = RedisConnectionError("refused")
    backend.set.side_effect = RedisConnectionError("refused")
    backend.ping.side_effect = RedisConnectionError("refused")
    store = CacheStore(backend)

    app.dependency_overrides[get_cache_store] = lambda: store
    app.dependency_overrides[get_ppt_client] = lambda: ppt_client
    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            cards = await client.get("/api/cards")
            ready = await client.get("/ready")
        await store.drain()
    finally:
        app.dependency_overrides.clear()

    assert cards.status_code == 200
    assert len(cards.json()["data"]) == 3
    assert ready.json() == {"status": "ready", "cache": "disconnected"}


# ---------------------------------------------------------------------------
# Miss then hit
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_miss_is_written_under_route_key(api, ppt_client, cache_store, redis_backend) -> None:
    first = await api.get("/api/sets")
    await cache_store.drain()
    second = await api.get("/api/sets")

    assert first.json() == second.json()
    assert ppt_client.fetch_sets.await_count == 1
    assert "ppt:sets:page=1&pageSize=100" in redis_backend.data
    assert redis_backend.ttls["ppt:sets:page=1&pageSize=100"] == 604800


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_lifespan_owns_one_vendor_client(redis_backend) -> None:
    test_app = FastAPI()

    with patch("poketerminal.main.configure_logging"), \
            patch("poketerminal.main.create_redis_client", return_value=redis_backend):
        async with lifespan(test_app):
            client = test_app.state.ppt_client
            request = MagicMock()
            request.app = test_app

            assert get_ppt_client(request) is client
            assert get_ppt_client(request) is client
            assert get_cache_store(request) is test_app.state.cache_store
            assert client._client is not None

    assert client._client is None
    assert redis_backend.closed is True
