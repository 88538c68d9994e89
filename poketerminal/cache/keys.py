"""
Poke Terminal: Cache Key Builder

Maps a resource prefix plus an unordered parameter mapping onto a stable
string key:

    build_key("ppt:sets", {"pageSize": 100, "page": 1})
    -> "ppt:sets:page=1&pageSize=100"

Entries are sorted by key before joining, so insertion order never changes
the result. Values are NOT URL-encoded: callers must keep the separators
"&", "=" and ":" out of parameter values.
"""

from __future__ import annotations

from typing import Mapping, Union

from poketerminal.config import settings

ParamValue = Union[str, int, float, None]

# ---------------------------------------------------------------------------
# Key prefixes
# ---------------------------------------------------------------------------
CARDS_PREFIX = "ppt:cards"
CARD_PREFIX = "ppt:card"
SETS_PREFIX = "ppt:sets"
SET_PREFIX = "ppt:set"


class CacheTTL:
    """TTL per resource class, in seconds."""
    TYPES: int = settings.CACHE_TTL_TYPES
    SETS: int = settings.CACHE_TTL_SETS
    SET_DETAIL: int = settings.CACHE_TTL_SET_DETAIL
    CARDS: int = settings.CACHE_TTL_CARDS
    CARD_DETAIL: int = settings.CACHE_TTL_CARD_DETAIL


def build_key(prefix: str, params: Mapping[str, ParamValue] | None = None) -> str:
    """
    Build a deterministic cache key.

    Args:
        prefix: Resource prefix (e.g., "ppt:cards").
        params: Query parameters. None values are omitted, not encoded
                as empty.

    Returns:
        The prefix alone when there are no parameters, otherwise
        "prefix:k1=v1&k2=v2" with keys in lexicographic order.
    """
    if not params:
        return prefix

    entries = [(k, v) for k, v in params.items() if v is not None]
    if not entries:
        return prefix

    # Plain code-point ordering, independent of the process locale
    entries.sort(key=lambda item: item[0])
    encoded = "&".join(f"{k}={v}" for k, v in entries)
    return f"{prefix}:{encoded}"


def card_key(card_id: str) -> str:
    return f"{CARD_PREFIX}:{card_id}"


def set_key(set_id: str) -> str:
    return f"{SET_PREFIX}:{set_id}"


def sets_key(page: int, page_size: int) -> str:
    """Key for one locally paginated page of the set catalog."""
    return build_key(SETS_PREFIX, {"page": page, "pageSize": page_size})


def key_prefix(key: str) -> str:
    """Leading namespace of a key ("ppt:cards:..." -> "ppt")."""
    return key.split(":", 1)[0]
