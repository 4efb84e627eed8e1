# ===== IMPORTS & DEPENDENCIES =====
import logging

from aiohttp import web

from steam_fetch.web.common import (
    DATABASE_KEY, SERVICE_KEY, RequestValidationError, json_error, json_payload,
    json_success, read_json, validate
)
from steam_fetch.web.schemas import (
    AppIdParams, CategoryParams, GameCreate, GameQuery, GamesBatchCreate,
    GameUpdate, LimitQuery, PaginationQuery, SearchQuery
)

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

routes = web.RouteTableDef()

# Fixed paths are registered before /api/games/{appid} so they win the match.


# ===== STEAM-BACKED VIEWS =====
@routes.get("/api/games/popular")
async def get_popular_games(request: web.Request) -> web.Response:
    query = validate(LimitQuery, request.query)
    games = await request.app[SERVICE_KEY].get_popular_games(query.limit)
    return json_success(games, "Popular games fetched", count=len(games))


@routes.get("/api/games/discounted")
async def get_discounted_games(request: web.Request) -> web.Response:
    query = validate(LimitQuery, request.query)
    games = await request.app[SERVICE_KEY].get_discounted_games(query.limit)
    return json_success(games, "Discounted games fetched", count=len(games))


@routes.get("/api/games/upcoming")
async def get_upcoming_games(request: web.Request) -> web.Response:
    query = validate(LimitQuery, request.query)
    games = await request.app[SERVICE_KEY].get_upcoming_games(query.limit)
    return json_success(games, "Upcoming games fetched", count=len(games))


@routes.get("/api/games/search")
async def search_games(request: web.Request) -> web.Response:
    query = validate(SearchQuery, request.query)
    games = await request.app[SERVICE_KEY].search_games(query.q, query.limit)
    return json_success(games, f'Search "{query.q}" found {len(games)} games', count=len(games))


@routes.get("/api/games/category/{category}")
async def get_games_by_category(request: web.Request) -> web.Response:
    params = validate(CategoryParams, request.match_info)
    query = validate(LimitQuery, request.query)
    games = await request.app[SERVICE_KEY].get_games_by_category(params.category, query.limit)
    return json_success(games, f'Games in category "{params.category}" fetched', count=len(games))


# ===== LOCAL TABLE =====
@routes.get("/api/games/query")
async def query_games(request: web.Request) -> web.Response:
    query = validate(GameQuery, request.query)
    rows = request.app[DATABASE_KEY].query_games(appid=query.appid, name=query.name, limit=query.limit)
    return json_success([row.to_dict() for row in rows], f"Found {len(rows)} games", count=len(rows))


@routes.get("/api/games/local")
async def get_local_games(request: web.Request) -> web.Response:
    query = validate(PaginationQuery, request.query)
    rows = request.app[DATABASE_KEY].list_games(limit=query.limit, offset=query.offset)
    return json_success(
        [row.to_dict() for row in rows],
        f"Local games fetched (offset {query.offset}, limit {query.limit})",
        count=len(rows),
    )


@routes.post("/api/games/batch")
async def batch_create_games(request: web.Request) -> web.Response:
    body = await read_json(request)
    if isinstance(body, list):
        body = {"games": body}
    if not isinstance(body, dict):
        raise RequestValidationError("Request body must be an object with a 'games' list")
    payload = validate(GamesBatchCreate, body)

    saved, errors = request.app[DATABASE_KEY].upsert_games(game.model_dump() for game in payload.games)
    results = [row.to_dict() for row in saved]

    if errors and not saved:
        return json_error(500, "Batch insert failed", "All games failed to insert", data=[], errors=errors)
    if errors:
        return json_payload({
            "success": False,
            "message": f"Batch insert partially succeeded: {len(saved)} saved, {len(errors)} failed",
            "data": results,
            "errors": errors,
            "count": len(saved),
        }, status=207)
    return json_success(results, f"Batch insert succeeded: {len(saved)} games", count=len(saved), status=201)


@routes.post("/api/games")
@routes.post("/api/games/")
async def create_game(request: web.Request) -> web.Response:
    body = await read_json(request)
    if not isinstance(body, dict):
        raise RequestValidationError("Request body must be a JSON object")
    game = validate(GameCreate, body)
    row = request.app[DATABASE_KEY].upsert_game(game.appid, game.name)
    return json_success(row.to_dict(), f"Game saved: {row.name}", status=201)


@routes.put(r"/api/games/{appid:\d+}")
async def update_game(request: web.Request) -> web.Response:
    params = validate(AppIdParams, request.match_info)
    body = await read_json(request)
    if not isinstance(body, dict):
        raise RequestValidationError("Request body must be a JSON object")
    update = validate(GameUpdate, body)
    row = request.app[DATABASE_KEY].update_game_name(params.appid, update.name)
    if row is None:
        return json_error(404, "Game not found", f"No game with appid {params.appid}")
    return json_success(row.to_dict(), f"Game {params.appid} updated")


# ===== SINGLE GAME =====
@routes.get(r"/api/games/{appid:\d+}")
async def get_game_details(request: web.Request) -> web.Response:
    params = validate(AppIdParams, request.match_info)
    game = await request.app[SERVICE_KEY].get_game_details(params.appid)
    if game is None:
        return json_error(404, "Game not found", f"No game with appid {params.appid}")
    return json_success(game, f"Details for game {params.appid} fetched")
