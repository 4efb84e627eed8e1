# ===== IMPORTS & DEPENDENCIES =====
import json
from dataclasses import dataclass
from functools import partial
from typing import Any, Mapping, Optional, Type, TypeVar

from aiohttp import web
from pydantic import BaseModel, ValidationError

from steam_fetch.core.database import GamesDatabase
from steam_fetch.steam_service import SteamService

# ===== TYPES & INTERFACES =====
ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class AppSettings:
    """Runtime settings for one application instance."""
    app_env: str = "development"
    version: str = "1.0.0"
    database_path: str = "data/games.db"
    http_timeout: float = 25
    steam_api_key: Optional[str] = None
    steam_rate_limit: int = 100
    steam_cache_ttl: int = 3600
    scraper_strategy: str = "dom"

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


class RequestValidationError(Exception):
    """Query, path or body parameters failed validation."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ===== APP KEYS =====
SETTINGS_KEY = web.AppKey("settings", AppSettings)
SERVICE_KEY = web.AppKey("steam_service", SteamService)
DATABASE_KEY = web.AppKey("games_db", GamesDatabase)
STARTED_AT_KEY = web.AppKey("started_at", float)

_dumps = partial(json.dumps, ensure_ascii=False)


# ===== HELPER FUNCTIONS =====
def format_validation_error(error: ValidationError) -> str:
    """'limit: Input should be less than or equal to 100, q: Field required'"""
    parts = []
    for item in error.errors(include_url=False):
        location = ".".join(str(part) for part in item["loc"])
        parts.append(f"{location}: {item['msg']}" if location else item["msg"])
    return ", ".join(parts)


def validate(model: Type[ModelT], data: Mapping[str, Any]) -> ModelT:
    try:
        return model.model_validate(dict(data))
    except ValidationError as e:
        raise RequestValidationError(format_validation_error(e)) from e


async def read_json(request: web.Request) -> Any:
    try:
        return await request.json()
    except json.JSONDecodeError as e:
        raise RequestValidationError(f"Request body is not valid JSON: {e.msg}") from e


def json_success(data: Any, message: str, count: Optional[int] = None, status: int = 200) -> web.Response:
    payload = {"success": True, "message": message, "data": data}
    if count is not None:
        payload["count"] = count
    return web.json_response(payload, status=status, dumps=_dumps)


def json_error(status: int, error: str, message: str, **extra: Any) -> web.Response:
    payload = {"success": False, "error": error, "message": message, **extra}
    return web.json_response(payload, status=status, dumps=_dumps)


def json_payload(payload: Any, status: int = 200) -> web.Response:
    return web.json_response(payload, status=status, dumps=_dumps)
