"""
CLI runner for Untappd link resolution.

Usage:
    python -m untappd_links.run [OPTIONS]

    # Show how a beer name resolves against the Untappd API
    python -m untappd_links.run --resolve "Karhu III"

    # Repair stale links for a stored game
    python -m untappd_links.run --refresh 42

    # Create or upgrade the database schema
    python -m untappd_links.run --migrate
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from .client import UntappdClient
from .config import AppConfig
from .links import search_link_meta
from .maintenance import refresh_stale_links
from .migrations import get_current_version, get_pending_versions, run_migrations
from .repository import GameDatabase

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("untappd-links")


async def resolve_name(config: AppConfig, name: str) -> dict:
    """Resolve one beer name and describe the result."""
    client = UntappdClient(config.resolution)
    outcome = await client.resolve_outcome(config.credentials, name)
    result = outcome.to_dict()
    result["name"] = name
    if not outcome.matched:
        result["fallback_url"] = search_link_meta(name).untappd_url
    return result


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="untappd-links: Untappd link resolution for beer games",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m untappd_links.run --resolve "Karhu III"
    python -m untappd_links.run --config untappd_links.yaml --refresh 42
    python -m untappd_links.run --db beer_game.db --migrate
        """,
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=Path("untappd_links.yaml"),
        help="Path to config file (default: untappd_links.yaml)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        help="Override database path from config",
    )
    parser.add_argument(
        "--resolve",
        type=str,
        metavar="NAME",
        help="Resolve a beer name against the Untappd API",
    )
    parser.add_argument(
        "--refresh",
        type=int,
        metavar="GAME_ID",
        help="Reset missing or expired Untappd links for a game",
    )
    parser.add_argument(
        "--migrate",
        action="store_true",
        help="Apply pending database migrations",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = AppConfig.from_yaml(args.config)
    if args.db:
        config.db_path = args.db

    logger.info(f"Config loaded from {args.config}")
    logger.info(
        f"Untappd credentials configured: {config.credentials is not None}, "
        f"threshold={config.resolution.match_threshold}"
    )

    if args.migrate:
        pending = get_pending_versions(config.db_path)
        logger.info(f"Pending migrations: {pending or 'none'}")
        applied = run_migrations(config.db_path)
        logger.info(
            f"Applied {len(applied)} migration(s), schema version "
            f"{get_current_version(config.db_path)}"
        )
        return 0

    if args.resolve:
        result = asyncio.run(resolve_name(config, args.resolve))
        print(json.dumps(result, indent=2))
        return 0

    if args.refresh is not None:
        if not config.db_path.exists():
            logger.error(f"Database not found: {config.db_path}")
            logger.error("Run with --migrate first to create the database.")
            return 1
        db = GameDatabase(config.db_path)
        updated = refresh_stale_links(config, db, args.refresh)
        logger.info(f"Game {args.refresh}: {updated} link(s) reset")
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
