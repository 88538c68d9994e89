"""
Poke Terminal: Cache Seeding Script

Pre-populates Redis with the set catalog, the common card explorer queries
and the cards of the most recently released sets. Vendor calls use the
batch fetch policy (retries with backoff) and are spaced out to stay under
the vendor's rate limit.

Run after a deploy or a cache flush:

Usage:
    python scripts/seed_cache.py
    python scripts/seed_cache.py --recent-sets 10
    python scripts/seed_cache.py --skip-cards
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

# Resolve project root so this script can be run from any working directory
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from poketerminal.cache.store import CacheStore, create_redis_client
from poketerminal.config import settings
from poketerminal.main import configure_logging
from poketerminal.pipeline.ppt import BATCH_POLICY, FetchError, PPTClient
from poketerminal.pipeline.warmer import CacheWarmer


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Warm the Poke Terminal Redis cache from PokemonPriceTracker.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/seed_cache.py
  python scripts/seed_cache.py --recent-sets 10
  python scripts/seed_cache.py --skip-cards
""",
    )
    parser.add_argument(
        "--recent-sets",
        type=int,
        default=settings.SEED_RECENT_SET_COUNT,
        help=f"Number of newest sets whose cards are cached (default: {settings.SEED_RECENT_SET_COUNT}).",
    )
    parser.add_argument(
        "--skip-cards",
        action="store_true",
        help="Only cache the set catalog.",
    )
    return parser.parse_args()


async def main() -> None:
    args = parse_args()
    configure_logging(settings.LOG_LEVEL)

    if not settings.PPT_API_KEY:
        print("PPT_API_KEY is not set; seeding requires an API key.", file=sys.stderr)
        sys.exit(1)

    store = CacheStore(create_redis_client())
    if not await store.ping():
        print(f"Redis is not reachable at {settings.REDIS_URL}.", file=sys.stderr)
        await store.close()
        sys.exit(1)

    print("Seeding cache...")
    try:
        async with PPTClient(policy=BATCH_POLICY) as client:
            warmer = CacheWarmer(store, client, recent_set_count=args.recent_sets)
            report = await warmer.run(include_cards=not args.skip_cards)
    except FetchError as e:
        print(f"Seeding aborted: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        await store.close()

    print("Cache seeded successfully.")
    print(f"  sets           = {report.sets}")
    print(f"  card queries   = {report.card_queries}")
    print(f"  cards          = {report.cards}")
    print(f"  keys written   = {report.keys_written}")
    if report.write_failures:
        print(f"  write failures = {report.write_failures}")


if __name__ == "__main__":
    asyncio.run(main())
