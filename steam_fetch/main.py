# ===== IMPORTS & DEPENDENCIES =====
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from aiohttp import web

from steam_fetch.config import HOST, LOG_LEVEL, PORT, SYNC_BATCH_SIZE
from steam_fetch.core.base_client import SteamFetchClient, create_session
from steam_fetch.core.database import GamesDatabase
from steam_fetch.steam_service import SteamService
from steam_fetch.sync import sync_steam_games
from steam_fetch.web.app import create_app, settings_from_config

# ===== CONFIGURATION & CONSTANTS =====
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)


# ===== ENTRY POINTS =====
async def run_sync(batch_size: int) -> int:
    """One-off app-list sync into the local games table."""
    settings = settings_from_config()
    db = GamesDatabase(settings.database_path)
    async with create_session(settings.http_timeout) as session:
        service = SteamService(
            SteamFetchClient(session),
            api_key=settings.steam_api_key,
            rate_limit=settings.steam_rate_limit,
            cache_ttl=settings.steam_cache_ttl,
            scraper_strategy=settings.scraper_strategy,
        )
        return await sync_steam_games(service, db, batch_size)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="steam-fetch", description="Steam game metadata API")
    commands = parser.add_subparsers(dest="command")

    serve = commands.add_parser("serve", help="run the HTTP API (default)")
    serve.add_argument("--host", default=HOST)
    serve.add_argument("--port", type=int, default=PORT)

    sync = commands.add_parser("sync", help="sync the Steam app list into the local database")
    sync.add_argument("--batch-size", type=int, default=SYNC_BATCH_SIZE)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "sync":
        try:
            processed = asyncio.run(run_sync(args.batch_size))
        except Exception as e:
            logger.critical(f"🔥 App-list sync aborted: {e}")
            return 1
        logger.info(f"Sync complete: {processed} apps processed.")
        return 0

    host = getattr(args, "host", HOST)
    port = getattr(args, "port", PORT)
    logger.info(f"🚀 Starting Steam Fetch API on {host}:{port}")
    web.run_app(create_app(), host=host, port=port, print=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
