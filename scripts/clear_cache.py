"""
Poke Terminal: Cache Clearing Script

Deletes cached vendor responses matching a Redis glob pattern, deleting in
batches. Key counts are printed per prefix before anything is removed.

Usage:
    python scripts/clear_cache.py
    python scripts/clear_cache.py --pattern "ppt:cards:*"
    python scripts/clear_cache.py --dry-run
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

# Resolve project root so this script can be run from any working directory
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from redis.exceptions import RedisError

from poketerminal.cache.store import CacheStore, create_redis_client
from poketerminal.config import settings
from poketerminal.main import configure_logging
from poketerminal.pipeline.warmer import clear_cache


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Delete cached Poke Terminal keys from Redis.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/clear_cache.py
  python scripts/clear_cache.py --pattern "ppt:card:*"
  python scripts/clear_cache.py --pattern "ppt:sets*" --dry-run
""",
    )
    parser.add_argument(
        "--pattern",
        type=str,
        default="*",
        help='Redis glob of keys to delete (default: "*").',
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only list key counts per prefix.",
    )
    return parser.parse_args()


async def main() -> None:
    args = parse_args()
    configure_logging(settings.LOG_LEVEL)

    store = CacheStore(create_redis_client())
    try:
        report = await clear_cache(store, pattern=args.pattern, dry_run=args.dry_run)
    except (RedisError, OSError) as e:
        print(f"Failed to clear cache: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        await store.close()

    if not report.found:
        print(f"No keys match {args.pattern!r}.")
        return

    print(f"Found {report.found} key(s) matching {args.pattern!r}:")
    for prefix, count in sorted(report.by_prefix.items()):
        print(f"  {prefix:<10} {count}")

    if args.dry_run:
        print("Dry run: nothing deleted.")
    else:
        print(f"Deleted {report.deleted} key(s).")


if __name__ == "__main__":
    asyncio.run(main())
