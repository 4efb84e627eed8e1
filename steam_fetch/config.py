# ===== CONFIGURATION & CONSTANTS =====
import os

# --- General Settings ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
APP_ENV = os.getenv("APP_ENV", "development")
APP_VERSION = "1.0.0"
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8080"))
DATABASE_PATH = os.getenv("DATABASE_PATH", "data/games.db")
HTTP_TIMEOUT = 25  # seconds, total per request

# --- Steam Service Settings ---
# Stored and passed to SteamService; neither is enforced as behavior.
STEAM_API_KEY = os.getenv("STEAM_API_KEY")
STEAM_RATE_LIMIT = int(os.getenv("STEAM_RATE_LIMIT", "100"))
STEAM_CACHE_TTL = int(os.getenv("STEAM_CACHE_TTL", "3600"))

# "dom" uses BeautifulSoup selectors, "regex" the pattern fallback.
SCRAPER_STRATEGY = os.getenv("SCRAPER_STRATEGY", "dom").lower()

SYNC_BATCH_SIZE = 1000

# --- Web Scraping & API Headers ---
BROWSER_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8',
    'Accept-Language': 'zh-CN,zh;q=0.9,en-US;q=0.8,en;q=0.7',
    'Accept-Encoding': 'gzip, deflate, br',
    'Connection': 'keep-alive',
    'Upgrade-Insecure-Requests': '1'
}
JSON_HEADERS = {**BROWSER_HEADERS, 'Accept': 'application/json, text/plain, */*'}
PROTOBUF_HEADERS = {**BROWSER_HEADERS, 'Accept': 'application/x-protobuf, application/octet-stream'}

# --- Steam Store ---
STEAM_STORE_BASE_URL = "https://store.steampowered.com"
STEAM_STORE_APP_URL = STEAM_STORE_BASE_URL + "/app/{app_id}/?l={language}"
STEAM_APPDETAILS_URL = STEAM_STORE_BASE_URL + "/api/appdetails"
STEAM_SEARCH_URL = STEAM_STORE_BASE_URL + "/search/"
STEAM_AGECHECK_SET_URL = STEAM_STORE_BASE_URL + "/agecheckset/app/{app_id}/"
STEAM_STORE_LANGUAGE = "schinese"

# --- Steam Community ---
STEAM_COMMUNITY_BASE_URL = "https://steamcommunity.com"
STEAM_COMMUNITY_APP_URL = STEAM_COMMUNITY_BASE_URL + "/app/{app_id}"
AGECHECK_BYPASS_SNR = "1_agecheck_agecheck__age-gate"

# --- Steam Web API ---
STEAM_WEB_API_BASE_URL = "https://api.steampowered.com"
STEAM_APP_LIST_URL = STEAM_WEB_API_BASE_URL + "/ISteamApps/GetAppList/v2/"
STEAM_CURRENT_PLAYERS_URL = STEAM_WEB_API_BASE_URL + "/ISteamUserStats/GetNumberOfCurrentPlayers/v1/"
STEAM_TOP_SELLERS_URL = STEAM_WEB_API_BASE_URL + "/IStoreTopSellersService/GetWeeklyTopSellers/v1"
STEAM_CONCURRENT_PLAYERS_URL = STEAM_WEB_API_BASE_URL + "/ISteamChartsService/GetGamesByConcurrentPlayers/v1"

# --- Language & Currency ---
# Steam language code -> store country code used for pricing
LANGUAGE_CURRENCY_MAP = {
    "schinese": "cn",
    "tchinese": "tw",
    "japanese": "jp",
    "koreana": "kr",
    "english": "us",
}
DEFAULT_API_LANGUAGE = "english"

# --- Catalog Views ---
# Each value is appended to the store search URL
CATALOG_SEARCH_PARAMS = {
    "popular": {"sort_by": "_ASC", "supportedlang": "schinese", "ndl": "1"},
    "discounted": {"specials": "1", "ndl": "1", "l": "schinese"},
    "upcoming": {"category1": "998", "ndl": "1", "l": "schinese"},
}
CATEGORY_SEARCH_PARAMS = {
    "action": {"category1": "19"},
    "adventure": {"category1": "25"},
    "strategy": {"category1": "2"},
    "rpg": {"category1": "122"},
    "simulation": {"category1": "28"},
    "sports": {"category1": "701"},
    "racing": {"category1": "699"},
    "indie": {"category1": "492"},
    "free": {"genre": "Free to Play"},
}

# --- Age Gate ---
# Substrings identifying Steam's age check / content preference interstitial
AGE_GATE_SIGNATURES = [
    "agecheck",
    "age_gate",
    "ageYear",
    "ageDay",
    "contentcheck_header",
    "contentcheck_desc_ctn",
    "AcceptAppHub",
    "View Community Hub",
    "THIS GAME CONTAINS CONTENT YOU HAVE ASKED NOT TO SEE",
]
AGE_GATE_FORM = {"ageDay": "1", "ageMonth": "January", "ageYear": "1990"}
MATURE_BIRTHTIME = "631152001"  # 1990-01-01
