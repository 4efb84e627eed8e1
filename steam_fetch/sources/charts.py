# ===== IMPORTS & DEPENDENCIES =====
import base64
import logging
from typing import Any, Dict, Optional

from google.protobuf import json_format
from google.protobuf.message import DecodeError, Message

from steam_fetch.config import PROTOBUF_HEADERS, STEAM_CONCURRENT_PLAYERS_URL, STEAM_TOP_SELLERS_URL
from steam_fetch.core.base_client import SteamFetchClient
from steam_fetch.core.errors import MalformedUpstreamError
from steam_fetch.models.protos import (
    ConcurrentPlayersRequest, ConcurrentPlayersResponse, StoreBrowseContext,
    StoreBrowseItemDataRequest, WeeklyTopSellersRequest, WeeklyTopSellersResponse
)

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

# Item data requested alongside every chart row
ITEM_DATA_FLAGS = {
    "include_assets": True,
    "include_release": True,
    "include_platforms": True,
    "include_all_purchase_options": True,
    "include_basic_info": True,
}


# ===== HELPER FUNCTIONS =====
def encode_request(message: Message) -> Dict[str, str]:
    """Steam's protobuf services take the serialized request base64-encoded in the query string."""
    return {"input_protobuf_encoded": base64.b64encode(message.SerializeToString()).decode("ascii")}


def decode_response(message_type: Any, body: bytes, source: str) -> Dict[str, Any]:
    """
    Parses a binary response into a JSON-safe dict.
    64-bit integers come out as strings, per the protobuf JSON mapping.
    """
    try:
        message = message_type.FromString(body)
    except DecodeError as e:
        raise MalformedUpstreamError(f"Undecodable protobuf payload from {source}: {e}") from e
    return json_format.MessageToDict(message, preserving_proto_field_name=True)


# ===== CORE BUSINESS LOGIC =====
class SteamCharts:
    """Weekly top sellers and live concurrent player charts."""

    def __init__(self, client: SteamFetchClient, api_key: Optional[str] = None):
        self._client = client
        self._api_key = api_key

    async def _call(self, url: str, request: Message, response_type: Any) -> Dict[str, Any]:
        params = encode_request(request)
        if self._api_key:
            params["key"] = self._api_key
        body = await self._client.fetch_bytes(url, headers=PROTOBUF_HEADERS, params=params)
        result = decode_response(response_type, body, url)
        logger.info(f"[{self.__class__.__name__}] {len(result.get('ranks', []))} ranks decoded from {url}")
        return result

    async def get_store_top_sellers(
        self,
        country_code: str = "US",
        page_start: int = 0,
        page_count: int = 20,
        language: str = "english"
    ) -> Dict[str, Any]:
        request = WeeklyTopSellersRequest(
            country_code=country_code,
            context=StoreBrowseContext(language=language, country_code=country_code),
            data_request=StoreBrowseItemDataRequest(**ITEM_DATA_FLAGS),
            page_start=page_start,
            page_count=page_count,
        )
        return await self._call(STEAM_TOP_SELLERS_URL, request, WeeklyTopSellersResponse)

    async def get_games_by_concurrent_players(self, language: str = "english", country_code: str = "US") -> Dict[str, Any]:
        request = ConcurrentPlayersRequest(
            context=StoreBrowseContext(language=language, country_code=country_code),
            data_request=StoreBrowseItemDataRequest(**ITEM_DATA_FLAGS),
        )
        return await self._call(STEAM_CONCURRENT_PLAYERS_URL, request, ConcurrentPlayersResponse)
