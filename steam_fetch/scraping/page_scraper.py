# ===== IMPORTS & DEPENDENCIES =====
import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from steam_fetch.models.game import DATA_SOURCE_STORE_PAGE, PartialGameRecord
from steam_fetch.scraping.extractors import Extractor
from steam_fetch.scraping.rules import SCRATCH_FIELDS, STORE_PAGE_RULES, ExtractionRule
from steam_fetch.utils.text_utils import digits_only, sanitize_html, strip_tags, unique_ordered

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

_SCRIPT_RE = re.compile(r'<script\b[^>]*>(.*?)</script>', re.DOTALL | re.IGNORECASE)
_WINDOW_ASSIGNMENT_RE = re.compile(r'window\.([A-Za-z_$][\w$]*)\s*=\s*(?=\{)')
_COMING_SOON_RE = re.compile(r'game_area_comingsoon|class="[^"]*(?<![\w-])coming_soon(?![\w-])')

PLATFORM_NAMES = {"win": "windows", "mac": "mac", "linux": "linux", "steamplay": "linux"}
FREE_PRICE_MARKERS = ("free", "免费")

# List fields de-duplicated by the cleanup pass, first occurrence kept.
DEDUPLICATED_FIELDS = ("tags", "genres", "categories", "supported_platforms", "dlc_list", "screenshots")

# Island keys copied as-is when present and non-empty.
ISLAND_PASSTHROUGH_FIELDS = {
    "type": "type",
    "controller_support": "controller_support",
    "categories": "categories",
    "genres": "genres",
    "movies": "movies",
    "support_info": "support_info",
    "background": "background",
    "content_descriptors": "content_descriptors",
    "metacritic": "metacritic",
    "demos": "demos",
    "dlc": "full_dlc_list",
    "ext_user_account_notice": "ext_user_account_notice",
}


# ===== HELPER FUNCTIONS =====
def _to_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _requirement_block(raw: Any) -> Dict[str, str]:
    """Steam sends {"minimum": html, "recommended": html}, or [] when absent."""
    if not isinstance(raw, dict):
        return {}
    block = {}
    for key in ("minimum", "recommended"):
        text = sanitize_html(raw.get(key) or "")
        if text:
            block[key] = text
    return block


def parse_supported_languages(raw: str) -> Tuple[str, List[Dict[str, Any]]]:
    """
    Splits Steam's language blob, e.g.
    'English<strong>*</strong>, French<br><strong>*</strong>languages with full audio support'
    into a summary string and [{'language': 'English', 'full_audio': True}, ...].
    """
    listing = re.split(r'<br\s*/?>', raw, maxsplit=1)[0]
    detailed = []
    for chunk in listing.split(','):
        full_audio = '*' in strip_tags(chunk)
        language = strip_tags(chunk).replace('*', '').strip()
        if language:
            detailed.append({"language": language, "full_audio": full_audio})
    detailed = unique_ordered(detailed, key=lambda entry: entry["language"])
    summary = ", ".join(entry["language"] for entry in detailed)
    return summary, detailed


def parse_review_numbers(text: str) -> Tuple[Optional[int], Optional[int]]:
    """
    Pulls (score %, review count) out of review copy such as
    '- 97% of the 547,203 user reviews ...' or '(547,203)'.
    """
    score = None
    percent = re.search(r'(\d{1,3})\s*%', text)
    if percent:
        score = int(percent.group(1))
    remainder = re.sub(r'\d{1,3}\s*%', ' ', text)
    counts = [int(re.sub(r'\D', '', number)) for number in re.findall(r'\d[\d,.]*', remainder)]
    return score, (max(counts) if counts else None)


# ===== CORE BUSINESS LOGIC =====
class PageScraper:
    """
    Turns a Steam store page into a partial GameRecord.

    The embedded JSON island is read first; the extraction rules then only
    fill fields the island left unset; a cleanup pass normalizes the result.
    Every call works on its own local state.
    """

    def __init__(
        self,
        extractor: Extractor,
        rules: Sequence[ExtractionRule] = STORE_PAGE_RULES,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self._extractor = extractor
        self._rules = tuple(rules)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def strategy(self) -> str:
        return self._extractor.name

    def scrape(self, html: str, appid: int) -> Optional[PartialGameRecord]:
        """Returns the scraped record, or None when the page carries no game name."""
        record: PartialGameRecord = {}

        island = self._parse_json_island(html, appid)
        if island:
            record.update(self._record_from_island(island))

        document = self._extractor.parse(html)
        for rule in self._rules:
            if rule.field in record:
                continue
            value = self._extractor.extract(document, rule)
            if value:
                record[rule.field] = value

        self._apply_page_markers(html, record)
        return self._cleanup(record, appid)

    # --- JSON island ---

    def _parse_json_island(self, html: str, appid: int) -> Optional[Dict[str, Any]]:
        """
        Finds a `window.<name> = {...}` assignment keyed by the appid.
        Malformed JSON is logged and skipped; it never aborts the scrape.
        """
        key = str(appid)
        decoder = json.JSONDecoder()
        for script in _SCRIPT_RE.finditer(html):
            body = script.group(1)
            for assignment in _WINDOW_ASSIGNMENT_RE.finditer(body):
                try:
                    payload, _ = decoder.raw_decode(body, assignment.end())
                except json.JSONDecodeError as e:
                    logger.warning(f"⚠️ [{self.__class__.__name__}] Malformed JSON island 'window.{assignment.group(1)}' for appid={appid}: {e}")
                    continue
                if not isinstance(payload, dict) or key not in payload:
                    continue
                entry = payload[key]
                # appdetails-shaped islands wrap the data as {"success": true, "data": {...}}
                if isinstance(entry, dict) and isinstance(entry.get("data"), dict):
                    entry = entry["data"]
                if isinstance(entry, dict):
                    logger.debug(f"[{self.__class__.__name__}] JSON island 'window.{assignment.group(1)}' found for appid={appid}")
                    return entry
        return None

    def _record_from_island(self, data: Dict[str, Any]) -> PartialGameRecord:
        record: PartialGameRecord = {}

        for source_key, field in ISLAND_PASSTHROUGH_FIELDS.items():
            value = data.get(source_key)
            if value:
                record[field] = value

        required_age = _to_int(data.get("required_age"))
        if required_age is not None:
            record["required_age"] = required_age

        screenshots = [
            shot.get("path_full") for shot in data.get("screenshots") or []
            if isinstance(shot, dict) and shot.get("path_full")
        ]
        if screenshots:
            record["screenshots"] = screenshots

        recommendations = data.get("recommendations")
        if isinstance(recommendations, dict) and recommendations:
            record["recommendations"] = recommendations
            total = _to_int(recommendations.get("total"))
            if total is not None:
                record["review_count"] = total

        achievements = data.get("achievements")
        if isinstance(achievements, dict) and achievements:
            record["achievements"] = achievements
            total = _to_int(achievements.get("total"))
            if total is not None:
                record["achievement_count"] = str(total)

        release = data.get("release_date")
        if isinstance(release, dict):
            if release.get("date"):
                record["release_date"] = release["date"]
            if release.get("coming_soon"):
                record["is_upcoming"] = True
        elif isinstance(release, str) and release:
            record["release_date"] = release

        system_requirements = {}
        for platform in ("pc", "mac", "linux"):
            block = _requirement_block(data.get(f"{platform}_requirements"))
            if block:
                record[f"{platform}_requirements"] = block
                system_requirements[platform] = block
        if system_requirements:
            record["system_requirements"] = system_requirements

        price = data.get("price_overview")
        if isinstance(price, dict) and price:
            record["price_overview"] = price
            discount = _to_int(price.get("discount_percent")) or 0
            if price.get("final_formatted"):
                record["current_price"] = price["final_formatted"]
                if discount > 0:
                    record["discounted_price"] = price["final_formatted"]
            if discount > 0:
                record["discount_percentage"] = str(discount)
                record["is_on_sale"] = True
                if price.get("initial_formatted"):
                    record["original_price"] = price["initial_formatted"]

        if data.get("is_free") is True:
            record["is_free"] = True

        legal_notice = sanitize_html(data.get("legal_notice") or "")
        if legal_notice:
            record["legal_notice"] = legal_notice

        languages = data.get("supported_languages")
        if isinstance(languages, str) and languages:
            summary, detailed = parse_supported_languages(languages)
            if summary:
                record["supported_languages"] = summary
                record["supported_languages_detailed"] = detailed

        return record

    # --- page markers & cleanup ---

    def _apply_page_markers(self, html: str, record: PartialGameRecord) -> None:
        if "is_early_access" not in record and "early_access_header" in html:
            record["is_early_access"] = True
        if "is_upcoming" not in record and _COMING_SOON_RE.search(html):
            record["is_upcoming"] = True

    def _cleanup(self, record: PartialGameRecord, appid: int) -> Optional[PartialGameRecord]:
        name = record.get("name")
        if not isinstance(name, str) or not name.strip():
            logger.info(f"[{self.__class__.__name__}] No game name found for appid={appid}; page rejected.")
            return None
        record["name"] = name.strip()

        if record.get("discount_percentage"):
            record["discount_percentage"] = digits_only(str(record["discount_percentage"]))
        if record.get("achievement_count"):
            record["achievement_count"] = digits_only(str(record["achievement_count"]))

        if record.get("review_description"):
            score, count = parse_review_numbers(record["review_description"])
            if score is not None:
                record.setdefault("review_score", score)
            if count is not None:
                record.setdefault("review_count", count)

        minimum = record.pop(SCRATCH_FIELDS[0], None)
        recommended = record.pop(SCRATCH_FIELDS[1], None)
        if "pc_requirements" not in record and (minimum or recommended):
            block = {key: value for key, value in (("minimum", minimum), ("recommended", recommended)) if value}
            record["pc_requirements"] = block
            record["system_requirements"] = {**record.get("system_requirements", {}), "pc": block}

        if isinstance(record.get("supported_platforms"), list):
            record["supported_platforms"] = [
                PLATFORM_NAMES[token]
                for value in record["supported_platforms"]
                for token in value.split()
                if token in PLATFORM_NAMES
            ]
        if isinstance(record.get("supported_languages"), list):
            record["supported_languages"] = ", ".join(record["supported_languages"])

        for field in DEDUPLICATED_FIELDS:
            if isinstance(record.get(field), list):
                record[field] = unique_ordered(record[field])

        if record.get("current_price"):
            record.setdefault("price", record["current_price"])

        price_text = (record.get("price") or "").lower()
        discount = int(record.get("discount_percentage") or 0)
        record["is_on_sale"] = bool(record.get("is_on_sale") or record.get("original_price") or discount > 0)
        record["is_free"] = bool(record.get("is_free") or any(marker in price_text for marker in FREE_PRICE_MARKERS))
        record["is_upcoming"] = bool(record.get("is_upcoming"))
        record["is_early_access"] = bool(record.get("is_early_access"))

        cleaned = {key: value for key, value in record.items() if isinstance(value, bool) or value}
        cleaned["appid"] = appid
        cleaned["scraped_at"] = self._clock().isoformat()
        cleaned["data_source"] = DATA_SOURCE_STORE_PAGE
        return cleaned
