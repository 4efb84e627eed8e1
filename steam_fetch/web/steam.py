# ===== IMPORTS & DEPENDENCIES =====
from aiohttp import web

from steam_fetch.web.common import SERVICE_KEY, json_success, validate
from steam_fetch.web.schemas import AppIdParams, ChartsQuery, CommunityQuery, TopSellersQuery

routes = web.RouteTableDef()


# ===== ROUTES =====
@routes.get("/api/steam/apps")
async def get_all_apps(request: web.Request) -> web.Response:
    apps = await request.app[SERVICE_KEY].get_all_games()
    return json_success(apps, "Steam app list fetched", count=len(apps))


@routes.get("/api/steam/top-sellers")
async def get_top_sellers(request: web.Request) -> web.Response:
    query = validate(TopSellersQuery, request.query)
    result = await request.app[SERVICE_KEY].get_store_top_sellers(
        country_code=query.country_code,
        page_start=query.page_start,
        page_count=query.page_count,
        language=query.language,
    )
    return json_success(result, "Weekly top sellers fetched", count=len(result.get("ranks", [])))


@routes.get("/api/steam/charts/concurrent")
async def get_concurrent_players_chart(request: web.Request) -> web.Response:
    query = validate(ChartsQuery, request.query)
    result = await request.app[SERVICE_KEY].get_games_by_concurrent_players(
        language=query.language,
        country_code=query.country_code,
    )
    return json_success(result, "Concurrent players chart fetched", count=len(result.get("ranks", [])))


@routes.get(r"/api/steam/players/{appid:\d+}")
async def get_current_players(request: web.Request) -> web.Response:
    params = validate(AppIdParams, request.match_info)
    players = await request.app[SERVICE_KEY].get_number_of_current_players(params.appid)
    return json_success({"appid": params.appid, "player_count": players}, f"Current players for {params.appid} fetched")


@routes.get(r"/api/steam/community/{appid:\d+}")
async def get_community_page(request: web.Request) -> web.Response:
    params = validate(AppIdParams, request.match_info)
    query = validate(CommunityQuery, request.query)
    html = await request.app[SERVICE_KEY].get_game_community_html(params.appid, query.section)
    return web.Response(text=html, content_type="text/html")
