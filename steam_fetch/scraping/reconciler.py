# ===== IMPORTS & DEPENDENCIES =====
import logging
from typing import Any, Dict, Optional

from steam_fetch.models.game import DATA_SOURCE_API, GameRecord, PartialGameRecord, validate_game_record

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)


# ===== CORE BUSINESS LOGIC =====
def merge_records(*layers: Optional[PartialGameRecord]) -> PartialGameRecord:
    """
    Shallow-merges partial records in precedence order: later layers win.
    A None value never overwrites an existing one; missing layers are skipped.
    """
    merged: PartialGameRecord = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            if value is None:
                continue
            merged[key] = value
    return merged


def _first(values: Any) -> Optional[str]:
    if isinstance(values, list) and values:
        return values[0]
    return None


def _release_date(release: Any) -> str:
    if isinstance(release, str):
        return release
    if isinstance(release, dict):
        return release.get("date") or ""
    return ""


def api_layer(payload: Dict[str, Any]) -> PartialGameRecord:
    """Maps a Steam appdetails `data` object onto GameRecord fields."""
    screenshots = [
        shot.get("path_full") for shot in payload.get("screenshots") or []
        if isinstance(shot, dict) and shot.get("path_full")
    ]
    return {
        "name": payload.get("name"),
        "developer": _first(payload.get("developers")),
        "publisher": _first(payload.get("publishers")),
        "release_date": _release_date(payload.get("release_date")),
        "short_description": payload.get("short_description"),
        "header_image": payload.get("header_image"),
        "screenshots": screenshots,
        "is_free": payload.get("is_free"),
        "data_source": DATA_SOURCE_API,
    }


def reconcile(
    appid: int,
    api_payload: Optional[Dict[str, Any]],
    scraped: Optional[PartialGameRecord],
    overrides: Optional[PartialGameRecord] = None
) -> Optional[GameRecord]:
    """
    Builds the final record: {appid} < API layer < scraped page < overrides.
    Returns None when the merged record has no name or fails validation.
    """
    merged = merge_records(
        {"appid": appid},
        api_layer(api_payload) if api_payload else None,
        scraped,
        overrides,
    )
    name = merged.get("name")
    if not isinstance(name, str) or not name.strip():
        logger.info(f"[reconcile] No name for appid={appid} from any source.")
        return None
    return validate_game_record(merged)
