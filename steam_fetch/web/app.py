# ===== IMPORTS & DEPENDENCIES =====
import logging
import time
from typing import AsyncIterator, Optional

from aiohttp import web

from steam_fetch import config
from steam_fetch.core.base_client import SteamFetchClient, create_session
from steam_fetch.core.database import GamesDatabase
from steam_fetch.core.errors import HttpError
from steam_fetch.steam_service import SteamService
from steam_fetch.web import games, health, steam
from steam_fetch.web.common import (
    DATABASE_KEY, SERVICE_KEY, SETTINGS_KEY, STARTED_AT_KEY, AppSettings,
    RequestValidationError, json_error
)

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}
UNLOGGED_PATHS = ("/health",)


def settings_from_config() -> AppSettings:
    return AppSettings(
        app_env=config.APP_ENV,
        version=config.APP_VERSION,
        database_path=config.DATABASE_PATH,
        http_timeout=config.HTTP_TIMEOUT,
        steam_api_key=config.STEAM_API_KEY,
        steam_rate_limit=config.STEAM_RATE_LIMIT,
        steam_cache_ttl=config.STEAM_CACHE_TTL,
        scraper_strategy=config.SCRAPER_STRATEGY,
    )


# ===== MIDDLEWARES =====
@web.middleware
async def cors_middleware(request: web.Request, handler) -> web.StreamResponse:
    if request.method == "OPTIONS":
        response = web.Response(status=204)
    else:
        response = await handler(request)
    response.headers.update(CORS_HEADERS)
    return response


@web.middleware
async def request_logging_middleware(request: web.Request, handler) -> web.StreamResponse:
    if request.path in UNLOGGED_PATHS:
        return await handler(request)

    started = time.monotonic()
    logger.info(f"[HTTP] ➡️ {request.method} {request.path} (ua={request.headers.get('User-Agent', 'unknown')})")
    response = await handler(request)
    duration_ms = round((time.monotonic() - started) * 1000)
    logger.info(f"[HTTP] ⬅️ {request.method} {request.path} -> {response.status} in {duration_ms}ms")
    return response


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Turns every failure into the JSON error envelope."""
    try:
        return await handler(request)
    except RequestValidationError as e:
        logger.warning(f"[HTTP] Validation error on {request.method} {request.path}: {e.message}")
        return json_error(400, "Validation Error", e.message)
    except web.HTTPNotFound:
        return json_error(404, "Not Found", "The requested resource does not exist, check the API path")
    except web.HTTPMethodNotAllowed as e:
        return json_error(405, "Method Not Allowed", f"{e.method} is not allowed on {request.path}")
    except web.HTTPException:
        raise
    except HttpError as e:
        logger.warning(f"⚠️ [HTTP] Upstream error on {request.path}: {e.message}")
        error = e.to_dict()
        return json_error(error.pop("status"), error.pop("name"), error.pop("message"), **error)
    except Exception as e:
        logger.error(f"❌ [HTTP] Unhandled error on {request.method} {request.path}: {e}", exc_info=True)
        settings = request.app[SETTINGS_KEY]
        message = str(e) if settings.is_development else "An unexpected error occurred"
        return json_error(500, "Internal Server Error", message)


# ===== APPLICATION FACTORY =====
def create_app(
    settings: Optional[AppSettings] = None,
    service: Optional[SteamService] = None,
    db: Optional[GamesDatabase] = None
) -> web.Application:
    """
    Builds the aiohttp application. A SteamService and GamesDatabase may be
    passed in; otherwise they are created from `settings`, with the outbound
    session opened on startup and closed on cleanup.
    """
    settings = settings or settings_from_config()
    app = web.Application(middlewares=[cors_middleware, request_logging_middleware, error_middleware])
    app[SETTINGS_KEY] = settings
    app[STARTED_AT_KEY] = time.monotonic()
    app[DATABASE_KEY] = db or GamesDatabase(settings.database_path)

    if service is not None:
        app[SERVICE_KEY] = service
    else:
        async def steam_service_ctx(app: web.Application) -> AsyncIterator[None]:
            session = create_session(settings.http_timeout)
            app[SERVICE_KEY] = SteamService(
                SteamFetchClient(session),
                api_key=settings.steam_api_key,
                rate_limit=settings.steam_rate_limit,
                cache_ttl=settings.steam_cache_ttl,
                scraper_strategy=settings.scraper_strategy,
            )
            yield
            await session.close()
            logger.info("[create_app] Outbound HTTP session closed.")

        app.cleanup_ctx.append(steam_service_ctx)

    app.add_routes(health.routes)
    app.add_routes(steam.routes)
    app.add_routes(games.routes)
    logger.info(f"[create_app] Application created (env={settings.app_env}, version={settings.version})")
    return app
