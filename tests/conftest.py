"""
Poke Terminal: Shared pytest Fixtures & Configuration

Provides common fixtures for all test modules:
- In-memory Redis stand-in for the cache store
- Mock PokemonPriceTracker API response data
- Async test support via pytest-asyncio
"""

from __future__ import annotations

import fnmatch
import json
from pathlib import Path
from typing import Any, AsyncIterator

import pytest

from poketerminal.cache.store import CacheStore
from poketerminal.models.vendor import VendorCardsResponse, VendorSetsResponse

FIXTURES = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Cache backend
# ---------------------------------------------------------------------------


class InMemoryRedis:
    """
    Dict-backed object exposing the slice of redis.asyncio.Redis that
    CacheStore calls. TTLs are recorded, never enforced.
    """

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.closed = False

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self.data[key] = value
        if ex is not None:
            self.ttls[key] = ex
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                self.ttls.pop(key, None)
                removed += 1
        return removed

    async def scan_iter(self, match: str = "*") -> AsyncIterator[str]:
        for key in list(self.data):
            if fnmatch.fnmatchcase(key, match):
                yield key

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def redis_backend() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
def cache_store(redis_backend: InMemoryRedis) -> CacheStore:
    return CacheStore(redis_backend)


# ---------------------------------------------------------------------------
# Fixture Loaders
# ---------------------------------------------------------------------------


def _load(name: str) -> dict[str, Any]:
    with open(FIXTURES / name) as f:
        return json.load(f)


@pytest.fixture(scope="session")
def load_ppt_cards() -> dict[str, Any]:
    """Raw /cards search payload from fixtures/ppt_cards.json."""
    return _load("ppt_cards.json")


@pytest.fixture(scope="session")
def load_ppt_sets() -> dict[str, Any]:
    """Raw /sets payload from fixtures/ppt_sets.json."""
    return _load("ppt_sets.json")


@pytest.fixture
def vendor_cards(load_ppt_cards: dict[str, Any]) -> VendorCardsResponse:
    return VendorCardsResponse.model_validate(load_ppt_cards)


@pytest.fixture
def vendor_sets(load_ppt_sets: dict[str, Any]) -> VendorSetsResponse:
    return VendorSetsResponse.model_validate(load_ppt_sets)
