#!/usr/bin/env python3
"""Inspect or prune the local API key cache.

Usage:
    # List cached keys (ids and prefixes only)
    PYTHONPATH=. python scripts/manage_api_key_cache.py list

    # Drop a revoked key
    PYTHONPATH=. python scripts/manage_api_key_cache.py remove --id key_123 --prefix sk_live_ab

    # Use a non-default cache file
    PYTHONPATH=. python scripts/manage_api_key_cache.py --path /tmp/keys.json list
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.asp_dashboard.cache import ApiKeyCache
from src.asp_dashboard.config import get_cache_path


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


async def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="ASP dashboard API key cache")
    parser.add_argument(
        "--path",
        type=Path,
        default=None,
        help="Cache file (defaults to API_KEY_CACHE_PATH or .api-keys-cache.json)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List cached key ids and prefixes")

    remove_parser = subparsers.add_parser("remove", help="Remove a cached key")
    remove_parser.add_argument("--id", required=True, dest="key_id", help="API key id")
    remove_parser.add_argument("--prefix", help="API key prefix")

    args = parser.parse_args()

    setup_logging(args.verbose)

    cache = ApiKeyCache(args.path or get_cache_path())

    if args.command == "list":
        entries = await cache.list_cached()
        if not entries:
            print(f"No keys cached in {cache.path}")
            return 0
        for key_id, prefix in entries:
            print(f"{key_id}\t{prefix}")
        return 0

    if await cache.get_by_id(args.key_id) is None:
        print(f"Key {args.key_id} is not cached", file=sys.stderr)
        return 1
    await cache.remove(args.key_id, args.prefix)
    print(f"Removed {args.key_id}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
