from poketerminal.cache.keys import CacheTTL, build_key, card_key, set_key, sets_key
from poketerminal.cache.store import CacheStore, create_redis_client

__all__ = [
    "CacheStore",
    "CacheTTL",
    "build_key",
    "card_key",
    "create_redis_client",
    "set_key",
    "sets_key",
]
