# ===== TYPES & INTERFACES =====
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import JsonValue, StringConstraints, TypeAdapter, ValidationError
from typing_extensions import Annotated, Required, TypedDict

logger = logging.getLogger(__name__)

DATA_SOURCE_API = "steam_api"
DATA_SOURCE_STORE_PAGE = "steam_store_page"

# Boolean fields that are always present on a finished record.
BOOLEAN_DEFAULTS = ("is_on_sale", "is_free", "is_upcoming", "is_early_access")


class RequirementBlock(TypedDict, total=False):
    minimum: str
    recommended: str


class LanguageSupport(TypedDict):
    language: str
    full_audio: bool


class GameRecord(TypedDict, total=False):
    """
    The normalized game entity, merged from the Steam API and the store page.
    `total=False` means every key except `appid` and `name` is optional, which
    matches how records are assembled layer by layer.

    Attributes:
        appid (int): Steam application id, the record's identity.
        name (str): Display name. A record without one is never produced.
        price / current_price / original_price / discounted_price (str):
            Display strings exactly as the store renders them (e.g. '¥ 89.00').
        discount_percentage (str): Digits only, e.g. '57'.
        tags (List[str]): User tags, deduplicated in first-seen order.
        genres / categories / movies / ... (JsonValue): Upstream payloads
            kept as opaque JSON.
        system_requirements (dict): {'pc'|'mac'|'linux': RequirementBlock}.
        scraped_at (str): ISO-8601 UTC timestamp of the page scrape.
        data_source (str): 'steam_api' or 'steam_store_page'.
    """
    # Identity
    appid: Required[int]
    name: Required[Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]]
    type: str

    # Descriptions
    short_description: str
    detailed_description: str

    # Pricing
    price: str
    current_price: str
    original_price: str
    discounted_price: str
    discount_percentage: str
    price_overview: JsonValue
    is_on_sale: bool
    is_free: bool

    # Release
    release_date: str
    is_upcoming: bool
    is_early_access: bool
    developer: str
    publisher: str

    # Reviews
    review_summary: str
    review_description: str
    review_score: int
    review_count: int

    # Media
    header_image: str
    screenshots: List[str]
    movies: JsonValue
    background: str

    # Classification
    tags: List[str]
    genres: JsonValue
    categories: JsonValue

    # Platform & technical
    supported_platforms: List[str]
    system_requirements: Dict[str, RequirementBlock]
    pc_requirements: RequirementBlock
    mac_requirements: RequirementBlock
    linux_requirements: RequirementBlock
    supported_languages: str
    supported_languages_detailed: List[LanguageSupport]
    controller_support: str

    # Extras
    achievement_count: str
    achievements: JsonValue
    dlc_list: List[str]
    full_dlc_list: JsonValue
    demos: JsonValue
    required_age: int
    content_descriptors: JsonValue
    recommendations: JsonValue
    support_info: JsonValue
    metacritic: JsonValue
    legal_notice: str
    ext_user_account_notice: str

    # Metadata
    scraped_at: str
    data_source: str


# Partial records flow between the scraper and the reconciler as plain dicts.
PartialGameRecord = Dict[str, Any]

_game_record_adapter = TypeAdapter(GameRecord)


def validate_game_record(data: PartialGameRecord) -> Optional[GameRecord]:
    """
    Validates a merged record against the GameRecord shape.
    Returns None instead of raising, so a structurally invalid record is
    indistinguishable from a missing one for callers.
    """
    candidate = dict(data)
    for key in BOOLEAN_DEFAULTS:
        candidate.setdefault(key, False)
    try:
        return _game_record_adapter.validate_python(candidate)
    except ValidationError as e:
        logger.warning(
            f"[validate_game_record] Record for appid={data.get('appid')} rejected: "
            f"{e.error_count()} validation error(s): {e.errors(include_url=False)}"
        )
        return None


@dataclass
class GameRow:
    """A row of the local `games` table."""
    appid: int
    name: str
    last_fetched_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "appid": self.appid,
            "name": self.name,
            "last_fetched_at": self.last_fetched_at.isoformat() if self.last_fetched_at else None,
        }
