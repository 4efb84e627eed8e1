# ===== IMPORTS & DEPENDENCIES =====
import logging
import re
from typing import Awaitable, Callable, Dict, List, Optional

from steam_fetch.config import (
    BROWSER_HEADERS, CATALOG_SEARCH_PARAMS, CATEGORY_SEARCH_PARAMS,
    STEAM_SEARCH_URL, STEAM_STORE_LANGUAGE
)
from steam_fetch.core.base_client import SteamFetchClient
from steam_fetch.core.errors import SteamFetchError
from steam_fetch.models.game import GameRecord

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

_ANCHOR_RE = re.compile(r'<a\b[^>]*>', re.IGNORECASE)
_RESULT_ROW_CLASS_RE = re.compile(r'(?<![\w-])class="[^"]*(?<![\w-])search_result_row(?![\w-])')
_APP_HREF_RE = re.compile(r'(?<![\w-])href="[^"]*/app/(\d+)/')

GameDetailsLookup = Callable[[int], Awaitable[Optional[GameRecord]]]


# ===== HELPER FUNCTIONS =====
def extract_app_ids(html: str, limit: int) -> List[int]:
    """
    Appids of the search result rows, in page order, at most `limit`.
    The row's href and class attributes may appear in any order.
    """
    appids = []
    for anchor in _ANCHOR_RE.finditer(html):
        if len(appids) >= limit:
            break
        tag = anchor.group(0)
        if not _RESULT_ROW_CLASS_RE.search(tag):
            continue
        href = _APP_HREF_RE.search(tag)
        if href:
            appids.append(int(href.group(1)))
    return appids


def _discount(record: GameRecord) -> int:
    value = record.get("discount_percentage") or ""
    return int(value) if str(value).isdigit() else 0


# ===== CORE BUSINESS LOGIC =====
class CatalogQuery:
    """
    Store search views (popular, discounted, upcoming, free text, category).

    Each view fetches one search page, takes the first `limit` appids and
    resolves them one at a time through `get_game_details`. A failing
    search yields an empty list; a failing game is left out.
    """

    def __init__(self, client: SteamFetchClient, get_game_details: GameDetailsLookup):
        self._client = client
        self._get_game_details = get_game_details

    async def _search_app_ids(self, view: str, params: Dict[str, str], limit: int) -> Optional[List[int]]:
        try:
            html = await self._client.fetch_text(STEAM_SEARCH_URL, headers=BROWSER_HEADERS, params=params)
        except SteamFetchError as e:
            logger.error(f"❌ [{self.__class__.__name__}] Search for '{view}' failed: {e}")
            return None
        appids = extract_app_ids(html, limit)
        logger.info(f"[{self.__class__.__name__}] '{view}' search returned {len(appids)} appids.")
        return appids

    async def _collect(self, view: str, params: Dict[str, str], limit: int) -> List[GameRecord]:
        appids = await self._search_app_ids(view, params, limit)
        if not appids:
            return []

        records = []
        for appid in appids:
            try:
                record = await self._get_game_details(appid)
            except Exception as e:
                logger.error(f"❌ [{self.__class__.__name__}] Details for appid={appid} failed, skipping: {e}", exc_info=True)
                continue
            if record:
                records.append(record)
        return records

    async def get_popular_games(self, limit: int = 20) -> List[GameRecord]:
        return await self._collect("popular", CATALOG_SEARCH_PARAMS["popular"], limit)

    async def get_discounted_games(self, limit: int = 50) -> List[GameRecord]:
        """On-sale games only, highest discount first; equal discounts keep search order."""
        records = await self._collect("discounted", CATALOG_SEARCH_PARAMS["discounted"], limit)
        on_sale = [record for record in records if record.get("is_on_sale")]
        return sorted(on_sale, key=_discount, reverse=True)

    async def get_upcoming_games(self, limit: int = 30) -> List[GameRecord]:
        return await self._collect("upcoming", CATALOG_SEARCH_PARAMS["upcoming"], limit)

    async def search_games(self, query: str, limit: int = 20) -> List[GameRecord]:
        params = {"term": query, "l": STEAM_STORE_LANGUAGE}
        return await self._collect(f"search:{query}", params, limit)

    async def get_games_by_category(self, category: str, limit: int = 20) -> List[GameRecord]:
        """Known categories map to store filters; anything else is searched as a term."""
        filters = CATEGORY_SEARCH_PARAMS.get(category.lower(), {"term": category})
        params = {**filters, "l": STEAM_STORE_LANGUAGE}
        return await self._collect(f"category:{category}", params, limit)
