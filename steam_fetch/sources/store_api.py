# ===== IMPORTS & DEPENDENCIES =====
import logging
from typing import Any, Dict, List, Optional, Tuple

from steam_fetch.config import (
    DEFAULT_API_LANGUAGE, LANGUAGE_CURRENCY_MAP, STEAM_APP_LIST_URL,
    STEAM_APPDETAILS_URL, STEAM_CURRENT_PLAYERS_URL
)
from steam_fetch.core.base_client import SteamFetchClient
from steam_fetch.core.errors import HttpError, SteamApiError, SteamFetchError

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)


# ===== HELPER FUNCTIONS =====
def resolve_language(language: Optional[str]) -> Tuple[str, str]:
    """Maps a Steam language code to (language, country code); unknown codes fall back to English/US."""
    if language in LANGUAGE_CURRENCY_MAP:
        return language, LANGUAGE_CURRENCY_MAP[language]
    return DEFAULT_API_LANGUAGE, LANGUAGE_CURRENCY_MAP[DEFAULT_API_LANGUAGE]


def _status_of(error: SteamFetchError) -> int:
    return error.status if isinstance(error, HttpError) else 502


# ===== CORE BUSINESS LOGIC =====
class SteamStoreApi:
    """Official Steam JSON endpoints: store appdetails and the public Web API."""

    def __init__(self, client: SteamFetchClient, api_key: Optional[str] = None):
        self._client = client
        self._api_key = api_key

    def _web_api_params(self, **params: Any) -> Dict[str, str]:
        query = {key: str(value) for key, value in params.items()}
        if self._api_key:
            query["key"] = self._api_key
        return query

    async def get_app_details(self, appid: int, language: str = "schinese") -> Optional[Dict[str, Any]]:
        """
        Returns the appdetails `data` object, or None when Steam reports no
        such app. Transport and HTTP failures propagate to the caller.
        """
        language, country_code = resolve_language(language)
        payload = await self._client.fetch_json(
            STEAM_APPDETAILS_URL,
            params={"appids": str(appid), "l": language, "cc": country_code},
        )
        entry = payload.get(str(appid)) if isinstance(payload, dict) else None
        if not isinstance(entry, dict) or not entry.get("success") or not isinstance(entry.get("data"), dict):
            logger.warning(f"[{self.__class__.__name__}] appdetails for appid={appid} was unsuccessful or empty.")
            return None
        return entry["data"]

    async def get_app_list(self) -> List[Dict[str, Any]]:
        """Every app Steam knows about, as [{'appid': int, 'name': str}, ...]."""
        try:
            payload = await self._client.fetch_json(STEAM_APP_LIST_URL, params=self._web_api_params())
        except SteamFetchError as e:
            logger.error(f"❌ [{self.__class__.__name__}] Failed to fetch the Steam app list: {e}", exc_info=True)
            raise SteamApiError(_status_of(e), "Unable to fetch the Steam app list") from e

        apps = (payload.get("applist") or {}).get("apps") if isinstance(payload, dict) else None
        if not isinstance(apps, list):
            raise SteamApiError(502, "Unable to fetch the Steam app list")
        logger.info(f"[{self.__class__.__name__}] Steam app list fetched: {len(apps)} apps.")
        return apps

    async def get_current_players(self, appid: int) -> int:
        try:
            payload = await self._client.fetch_json(
                STEAM_CURRENT_PLAYERS_URL,
                params=self._web_api_params(appid=appid),
            )
        except SteamFetchError as e:
            logger.warning(f"⚠️ [{self.__class__.__name__}] Current players lookup failed for appid={appid}: {e}")
            raise SteamApiError(_status_of(e), "Unable to fetch the current player count", appid=appid) from e

        response = payload.get("response") if isinstance(payload, dict) else None
        if not isinstance(response, dict) or response.get("result") != 1 or "player_count" not in response:
            raise SteamApiError(404, "No player count available", appid=appid)
        return int(response["player_count"])
