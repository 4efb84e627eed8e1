# ===== IMPORTS & DEPENDENCIES =====
import logging
import time
from datetime import datetime, timezone

from steam_fetch.core.database import GamesDatabase
from steam_fetch.steam_service import SteamService

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)


# ===== CORE BUSINESS LOGIC =====
async def sync_steam_games(service: SteamService, db: GamesDatabase, batch_size: int = 1000) -> int:
    """
    Copies Steam's full app list into the local games table.
    Existing appids are not touched. Returns the number of apps processed.
    """
    sync_id = str(int(time.time() * 1000))
    try:
        logger.info(
            f"[sync_steam_games] Sync {sync_id} started "
            f"(rate_limit={service.rate_limit}, cache_ttl={service.cache_ttl})"
        )
        apps = await service.get_all_games()
        total = len(apps)
        logger.info(f"[sync_steam_games] Sync {sync_id}: {total} apps fetched from Steam.")

        fetched_at = datetime.now(timezone.utc)
        processed = 0
        for start in range(0, total, batch_size):
            batch = apps[start:start + batch_size]
            inserted = db.insert_games_ignore_existing(batch, fetched_at)
            processed += len(batch)
            logger.debug(
                f"[sync_steam_games] Sync {sync_id}: {processed}/{total} "
                f"({round(processed / total * 100)}%), {inserted} new in this batch."
            )

        logger.info(f"✅ [sync_steam_games] Sync {sync_id} finished: {processed} apps processed.")
        return processed
    except Exception as e:
        logger.error(f"❌ [sync_steam_games] Sync {sync_id} failed: {e}", exc_info=True)
        raise
