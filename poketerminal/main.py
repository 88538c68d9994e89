"""
Poke Terminal: Application Entrypoint

Configures structlog, builds the FastAPI app and owns the Redis-backed
cache store for the lifetime of the process.

Run via:
    python -m poketerminal.main
"""

from __future__ import annotations

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from poketerminal.api import cards_router, health_router, sets_router, types_router
from poketerminal.cache.store import CacheStore, create_redis_client
from poketerminal.config import settings
from poketerminal.pipeline.ppt import REQUEST_PATH_POLICY, PPTClient

VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Structlog Configuration
# ---------------------------------------------------------------------------


def configure_logging(log_level: str = "INFO") -> None:
    """
    Set up structured logging with JSON output.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
    """
    # Configure stdlib logging first (for uvicorn, httpx, redis)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the cache store and the request-path vendor client on startup.
    On shutdown the client is closed and pending cache writes are drained.
    """
    configure_logging(settings.LOG_LEVEL)
    logger = structlog.get_logger(__name__)

    logger.info("poke_terminal_startup_begin", version=VERSION)
    if not settings.PPT_API_KEY:
        logger.warning("config_ppt_api_key_missing", note="vendor calls will be unauthenticated")

    store = CacheStore(create_redis_client())
    app.state.cache_store = store

    if await store.ping():
        logger.info("cache_connected")
    else:
        # Serve anyway; every request recomputes until Redis is back
        logger.warning("cache_unavailable_at_startup")

    try:
        async with PPTClient(policy=REQUEST_PATH_POLICY) as ppt_client:
            app.state.ppt_client = ppt_client
            logger.info("poke_terminal_startup_complete")
            yield
    finally:
        await store.close()
        logger.info("poke_terminal_shutdown_complete")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=VERSION,
        lifespan=lifespan,
    )

    app.include_router(cards_router)
    app.include_router(sets_router)
    app.include_router(types_router)
    app.include_router(health_router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in settings.CORS_ALLOW_ORIGINS.split(",")],
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI Entry
# ---------------------------------------------------------------------------


def main() -> None:
    uvicorn.run(
        "poketerminal.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
