# ===== IMPORTS & DEPENDENCIES =====
import logging
import random
from typing import Any, Dict, List, Optional

from steam_fetch.config import BROWSER_HEADERS, STEAM_STORE_APP_URL, STEAM_STORE_LANGUAGE
from steam_fetch.core.base_client import SteamFetchClient
from steam_fetch.core.errors import SteamFetchError
from steam_fetch.models.game import GameRecord, PartialGameRecord
from steam_fetch.scraping.extractors import extractor_for
from steam_fetch.scraping.page_scraper import PageScraper
from steam_fetch.scraping.reconciler import reconcile
from steam_fetch.sources.catalog import CatalogQuery
from steam_fetch.sources.charts import SteamCharts
from steam_fetch.sources.community import CommunityPageFetcher, build_cookie_jar, community_url, cookies_for
from steam_fetch.sources.store_api import SteamStoreApi

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)


# ===== CORE BUSINESS LOGIC =====
class SteamService:
    """
    Everything the HTTP layer asks of Steam, behind one object.

    Built once per application from explicit settings. `rate_limit` and
    `cache_ttl` are carried for callers that want them; the service itself
    neither throttles nor caches.
    """

    def __init__(
        self,
        client: SteamFetchClient,
        api_key: Optional[str] = None,
        rate_limit: int = 100,
        cache_ttl: int = 3600,
        scraper_strategy: str = "dom",
        rng: Optional[random.Random] = None
    ):
        self.rate_limit = rate_limit
        self.cache_ttl = cache_ttl
        self._client = client
        self._scraper = PageScraper(extractor_for(scraper_strategy))
        self._store_api = SteamStoreApi(client, api_key)
        self._charts = SteamCharts(client, api_key)
        self._community = CommunityPageFetcher(client, rng)
        self._catalog = CatalogQuery(client, self.get_game_details)
        logger.info(f"[{self.__class__.__name__}] Initialized with '{self._scraper.strategy}' scraping strategy.")

    @property
    def scraper_strategy(self) -> str:
        return self._scraper.strategy

    # --- URLs ---

    def get_game_store_url(self, appid: int, language: str = STEAM_STORE_LANGUAGE) -> str:
        return STEAM_STORE_APP_URL.format(app_id=appid, language=language)

    def get_game_community_url(self, appid: int, section: Optional[str] = None) -> str:
        return community_url(appid, section)

    # --- Single game ---

    async def scrape_game_page(self, appid: int) -> Optional[PartialGameRecord]:
        """Scrapes the store page; any fetch failure gives None."""
        url = self.get_game_store_url(appid)
        try:
            response = await self._client.fetch(
                url,
                headers=BROWSER_HEADERS,
                cookies=cookies_for(build_cookie_jar(appid), url),
            )
        except SteamFetchError as e:
            logger.warning(f"⚠️ [{self.__class__.__name__}] Store page fetch failed for appid={appid}: {e}")
            return None
        if not response.ok:
            logger.warning(f"⚠️ [{self.__class__.__name__}] Store page for appid={appid} answered {response.status}.")
            return None
        return self._scraper.scrape(response.text(), appid)

    async def get_api_game_details(self, appid: int, language: str = STEAM_STORE_LANGUAGE) -> Optional[Dict[str, Any]]:
        try:
            return await self._store_api.get_app_details(appid, language)
        except SteamFetchError as e:
            logger.warning(f"⚠️ [{self.__class__.__name__}] appdetails failed for appid={appid}: {e}")
            return None

    async def get_game_details(self, appid: int) -> Optional[GameRecord]:
        """
        API details and the scraped store page, reconciled into one record.
        None means either "no such game" or "every source failed"; the two
        cases are not told apart.
        """
        api_payload = await self.get_api_game_details(appid)
        if api_payload is None:
            logger.info(f"[{self.__class__.__name__}] No API data for appid={appid}, relying on the store page.")
        scraped = await self.scrape_game_page(appid)
        return reconcile(appid, api_payload, scraped)

    async def get_game_community_html(self, appid: int, section: Optional[str] = None) -> str:
        return await self._community.fetch(appid, section)

    # --- Catalog ---

    async def get_popular_games(self, limit: int = 20) -> List[GameRecord]:
        return await self._catalog.get_popular_games(limit)

    async def get_discounted_games(self, limit: int = 50) -> List[GameRecord]:
        return await self._catalog.get_discounted_games(limit)

    async def get_upcoming_games(self, limit: int = 30) -> List[GameRecord]:
        return await self._catalog.get_upcoming_games(limit)

    async def search_games(self, query: str, limit: int = 20) -> List[GameRecord]:
        return await self._catalog.search_games(query, limit)

    async def get_games_by_category(self, category: str, limit: int = 20) -> List[GameRecord]:
        return await self._catalog.get_games_by_category(category, limit)

    # --- Web API & charts ---

    async def get_all_games(self) -> List[Dict[str, Any]]:
        return await self._store_api.get_app_list()

    async def get_number_of_current_players(self, appid: int) -> int:
        return await self._store_api.get_current_players(appid)

    async def get_store_top_sellers(
        self,
        country_code: str = "US",
        page_start: int = 0,
        page_count: int = 20,
        language: str = "english"
    ) -> Dict[str, Any]:
        return await self._charts.get_store_top_sellers(country_code, page_start, page_count, language)

    async def get_games_by_concurrent_players(self, language: str = "english", country_code: str = "US") -> Dict[str, Any]:
        return await self._charts.get_games_by_concurrent_players(language, country_code)
