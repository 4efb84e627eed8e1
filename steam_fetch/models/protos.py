"""
Protobuf message types for Steam's IStoreTopSellersService and
ISteamChartsService endpoints.

Only the subset of fields this service reads is declared; unknown fields in
a response are skipped by the decoder. The messages are built from a
FileDescriptorProto at import time, so no generated _pb2 module is needed.
"""
# ===== IMPORTS & DEPENDENCIES =====
from typing import Dict, List, Optional, Tuple

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

# ===== CONFIGURATION & CONSTANTS =====
PACKAGE = "steam_fetch.store"

_F = descriptor_pb2.FieldDescriptorProto
STRING, BOOL, INT32, UINT32, INT64, MESSAGE = (
    _F.TYPE_STRING, _F.TYPE_BOOL, _F.TYPE_INT32, _F.TYPE_UINT32, _F.TYPE_INT64, _F.TYPE_MESSAGE
)

# message name -> [(field name, number, type, message type name or None, repeated)]
FieldSpec = Tuple[str, int, int, Optional[str], bool]
MESSAGE_LAYOUTS: Dict[str, List[FieldSpec]] = {
    "StoreBrowseContext": [
        ("language", 1, STRING, None, False),
        ("elanguage", 2, INT32, None, False),
        ("country_code", 3, STRING, None, False),
        ("steam_realm", 4, INT32, None, False),
    ],
    "StoreBrowseItemDataRequest": [
        ("include_assets", 1, BOOL, None, False),
        ("include_release", 2, BOOL, None, False),
        ("include_platforms", 3, BOOL, None, False),
        ("include_all_purchase_options", 4, BOOL, None, False),
        ("include_screenshots", 5, BOOL, None, False),
        ("include_trailers", 6, BOOL, None, False),
        ("include_ratings", 7, BOOL, None, False),
        ("include_tag_count", 8, INT32, None, False),
        ("include_reviews", 9, BOOL, None, False),
        ("include_basic_info", 10, BOOL, None, False),
    ],
    "StoreItem_PurchaseOption": [
        ("packageid", 1, INT32, None, False),
        ("bundleid", 2, INT32, None, False),
        ("purchase_option_name", 3, STRING, None, False),
        ("final_price_in_cents", 5, INT64, None, False),
        ("original_price_in_cents", 6, INT64, None, False),
        ("formatted_final_price", 8, STRING, None, False),
        ("formatted_original_price", 9, STRING, None, False),
        ("discount_pct", 10, INT32, None, False),
    ],
    "StoreItem": [
        ("item_type", 1, INT32, None, False),
        ("id", 2, UINT32, None, False),
        ("success", 3, UINT32, None, False),
        ("visible", 4, BOOL, None, False),
        ("name", 6, STRING, None, False),
        ("store_url_path", 7, STRING, None, False),
        ("appid", 9, UINT32, None, False),
        ("type", 10, INT32, None, False),
        ("is_free", 13, BOOL, None, False),
        ("is_early_access", 14, BOOL, None, False),
        ("best_purchase_option", 40, MESSAGE, "StoreItem_PurchaseOption", False),
    ],
    "CStoreTopSellers_GetWeeklyTopSellers_Request": [
        ("country_code", 1, STRING, None, False),
        ("context", 2, MESSAGE, "StoreBrowseContext", False),
        ("data_request", 3, MESSAGE, "StoreBrowseItemDataRequest", False),
        ("page_start", 4, INT32, None, False),
        ("page_count", 5, INT32, None, False),
        ("start_date", 6, UINT32, None, False),
    ],
    "CStoreTopSellers_GetWeeklyTopSellers_Response_TopSellerRank": [
        ("rank", 1, INT32, None, False),
        ("appid", 2, UINT32, None, False),
        ("item", 3, MESSAGE, "StoreItem", False),
        ("last_week_rank", 4, INT32, None, False),
        ("consecutive_weeks", 5, INT32, None, False),
        ("first_top", 6, BOOL, None, False),
    ],
    "CStoreTopSellers_GetWeeklyTopSellers_Response": [
        ("start_date", 1, UINT32, None, False),
        ("ranks", 2, MESSAGE, "CStoreTopSellers_GetWeeklyTopSellers_Response_TopSellerRank", True),
        ("next_page_start", 3, INT32, None, False),
    ],
    "CSteamCharts_GetGamesByConcurrentPlayers_Request": [
        ("context", 1, MESSAGE, "StoreBrowseContext", False),
        ("data_request", 2, MESSAGE, "StoreBrowseItemDataRequest", False),
    ],
    "CSteamCharts_GetGamesByConcurrentPlayers_Response_MostConcurrentGame": [
        ("rank", 1, INT32, None, False),
        ("appid", 2, UINT32, None, False),
        ("item", 3, MESSAGE, "StoreItem", False),
        ("concurrent_in_game", 4, UINT32, None, False),
        ("peak_in_game", 5, UINT32, None, False),
        ("peak_today", 6, UINT32, None, False),
    ],
    "CSteamCharts_GetGamesByConcurrentPlayers_Response": [
        ("last_update", 1, UINT32, None, False),
        ("ranks", 2, MESSAGE, "CSteamCharts_GetGamesByConcurrentPlayers_Response_MostConcurrentGame", True),
    ],
}


# ===== HELPER FUNCTIONS =====
def _build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="steam_fetch/store.proto",
        package=PACKAGE,
        syntax="proto2",
    )
    for message_name, fields in MESSAGE_LAYOUTS.items():
        message = file_proto.message_type.add(name=message_name)
        for name, number, field_type, type_name, repeated in fields:
            field = message.field.add(
                name=name,
                number=number,
                type=field_type,
                label=_F.LABEL_REPEATED if repeated else _F.LABEL_OPTIONAL,
            )
            if type_name:
                field.type_name = f".{PACKAGE}.{type_name}"
    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file_descriptor().SerializeToString())


def message_class(name: str):
    """Returns the generated message class for one of MESSAGE_LAYOUTS' names."""
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{PACKAGE}.{name}"))


# ===== MESSAGE TYPES =====
StoreBrowseContext = message_class("StoreBrowseContext")
StoreBrowseItemDataRequest = message_class("StoreBrowseItemDataRequest")
StoreItem = message_class("StoreItem")
WeeklyTopSellersRequest = message_class("CStoreTopSellers_GetWeeklyTopSellers_Request")
WeeklyTopSellersResponse = message_class("CStoreTopSellers_GetWeeklyTopSellers_Response")
ConcurrentPlayersRequest = message_class("CSteamCharts_GetGamesByConcurrentPlayers_Request")
ConcurrentPlayersResponse = message_class("CSteamCharts_GetGamesByConcurrentPlayers_Response")
