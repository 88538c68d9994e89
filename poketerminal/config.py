"""
Poke Terminal: Configuration & Constants

Every TTL, timeout, retry knob and endpoint lives here. No hardcoded values
in the cache, client or route modules.

Usage:
    from poketerminal.config import settings
"""

from __future__ import annotations

from pydantic_settings import BaseSettings


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """
    Central configuration for Poke Terminal.

    Loads from environment variables (or a local .env file) with fallback
    defaults.
    """

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # -----------------------------------------------------------------------
    # Application
    # -----------------------------------------------------------------------
    APP_NAME: str = "Poke Terminal"
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ALLOW_ORIGINS: str = "*"           # Comma-separated origins

    # -----------------------------------------------------------------------
    # PokemonPriceTracker API
    # An empty key still attempts the call (public tier)
    # -----------------------------------------------------------------------
    PPT_API_KEY: str = ""
    PPT_BASE_URL: str = "https://www.pokemonpricetracker.com/api/v2"
    PPT_HISTORY_DAYS: int = 365             # Pro plan maximum
    PPT_SETS_LIMIT: int = 250

    # -----------------------------------------------------------------------
    # Request-path fetch policy: one attempt, fail fast
    # -----------------------------------------------------------------------
    PPT_REQUEST_TIMEOUT_SECONDS: float = 30.0

    # -----------------------------------------------------------------------
    # Batch fetch policy (cache warming only)
    # delay = min(MAX, BASE * FACTOR ** attempt) + uniform(0, JITTER)
    # -----------------------------------------------------------------------
    PPT_BATCH_MAX_ATTEMPTS: int = 10
    PPT_BATCH_TIMEOUT_SECONDS: float = 120.0
    PPT_BATCH_BASE_DELAY_SECONDS: float = 3.0
    PPT_BATCH_BACKOFF_FACTOR: float = 1.5
    PPT_BATCH_MAX_DELAY_SECONDS: float = 30.0
    PPT_BATCH_JITTER_SECONDS: float = 2.0

    # -----------------------------------------------------------------------
    # Redis cache backend
    # -----------------------------------------------------------------------
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_SOCKET_TIMEOUT_SECONDS: float = 5.0

    # -----------------------------------------------------------------------
    # Cache TTLs (seconds). Longer means fewer vendor calls.
    # -----------------------------------------------------------------------
    CACHE_TTL_TYPES: int = 60 * 60 * 24 * 7        # 1 week, types never change
    CACHE_TTL_SETS: int = 60 * 60 * 24 * 7         # 1 week, new sets are rare
    CACHE_TTL_SET_DETAIL: int = 60 * 60 * 24       # 24 hours
    CACHE_TTL_CARDS: int = 60 * 60 * 6             # 6 hours, search results
    CACHE_TTL_CARD_DETAIL: int = 60 * 60 * 24      # 24 hours, prices update daily

    # -----------------------------------------------------------------------
    # Cache warming
    # -----------------------------------------------------------------------
    SEED_INTER_CALL_DELAY_SECONDS: float = 2.0
    SEED_SET_DELAY_SECONDS: float = 3.0
    SEED_RECENT_SET_COUNT: int = 5
    SEED_SET_PAGE_SIZES: str = "5,10,50,100"       # Comma-separated
    CLEAR_DELETE_BATCH_SIZE: int = 100


# Singleton instance
settings = Settings()
