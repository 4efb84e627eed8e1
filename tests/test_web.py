import pytest

from fakes import StubSteamService
from steam_fetch.core.database import GamesDatabase
from steam_fetch.core.errors import RateLimitError, SteamApiError
from steam_fetch.web.app import create_app
from steam_fetch.web.common import AppSettings

WITCHER = {"appid": 292030, "name": "The Witcher 3: Wild Hunt", "is_on_sale": True, "is_free": False,
           "is_upcoming": False, "is_early_access": False, "discount_percentage": "57"}


@pytest.fixture
def db(tmp_path):
    return GamesDatabase(str(tmp_path / "games.db"))


@pytest.fixture
def service():
    return StubSteamService(
        get_popular_games=[WITCHER],
        get_discounted_games=[WITCHER],
        get_upcoming_games=[],
        search_games=[WITCHER],
        get_games_by_category=[WITCHER],
        get_game_details=WITCHER,
        get_all_games=[{"appid": 10, "name": "Counter-Strike"}],
        get_number_of_current_players=4321,
        get_store_top_sellers={"start_date": 1704067200, "ranks": [{"rank": 1, "appid": 730}]},
        get_games_by_concurrent_players={"ranks": [{"rank": 1, "appid": 730, "concurrent_in_game": 1000}]},
        get_game_community_html="<html><body>社区</body></html>",
    )


@pytest.fixture
def make_client(aiohttp_client, tmp_path, db):
    async def factory(service, app_env="test"):
        settings = AppSettings(app_env=app_env, version="9.9.9", database_path=str(tmp_path / "unused.db"))
        return await aiohttp_client(create_app(settings=settings, service=service, db=db))
    return factory


@pytest.fixture
async def client(make_client, service):
    return await make_client(service)


async def test_health(client):
    response = await client.get("/health")
    assert response.status == 200
    body = await response.json()
    assert body["status"] == "ok"
    assert body["version"] == "9.9.9"
    assert body["uptime"] >= 0
    assert "timestamp" in body


async def test_cors_headers_and_preflight(client):
    response = await client.get("/health")
    assert response.headers["Access-Control-Allow-Origin"] == "*"

    preflight = await client.options("/api/games/popular")
    assert preflight.status == 204
    assert "POST" in preflight.headers["Access-Control-Allow-Methods"]


class TestSteamBackedViews:

    async def test_popular_envelope(self, client, service):
        response = await client.get("/api/games/popular", params={"limit": "5"})
        assert response.status == 200
        body = await response.json()
        assert body == {"success": True, "message": "Popular games fetched", "data": [WITCHER], "count": 1}
        assert service.calls == [("get_popular_games", (5,))]

    async def test_default_limit(self, client, service):
        await client.get("/api/games/discounted")
        assert service.calls == [("get_discounted_games", (20,))]

    async def test_empty_list_is_success(self, client):
        body = await (await client.get("/api/games/upcoming")).json()
        assert body["success"] is True
        assert body["data"] == []
        assert body["count"] == 0

    @pytest.mark.parametrize("limit", ["0", "101", "many"])
    async def test_limit_out_of_range(self, client, service, limit):
        response = await client.get("/api/games/popular", params={"limit": limit})
        assert response.status == 400
        body = await response.json()
        assert body["success"] is False
        assert body["error"] == "Validation Error"
        assert body["message"].startswith("limit: ")
        assert service.calls == []

    async def test_search_requires_query(self, client):
        response = await client.get("/api/games/search")
        assert response.status == 400
        assert "q: Field required" in (await response.json())["message"]

    async def test_search_passes_utf8_term(self, client, service):
        response = await client.get("/api/games/search", params={"q": "巫师", "limit": "3"})
        body = await response.json()
        assert body["message"] == 'Search "巫师" found 1 games'
        assert service.calls == [("search_games", ("巫师", 3))]

    async def test_category(self, client, service):
        response = await client.get("/api/games/category/rpg")
        assert response.status == 200
        assert service.calls == [("get_games_by_category", ("rpg", 20))]

    async def test_unknown_category(self, client):
        response = await client.get("/api/games/category/horror")
        assert response.status == 400
        assert (await response.json())["message"].startswith("category: ")

    async def test_game_details(self, client, service):
        response = await client.get("/api/games/292030")
        body = await response.json()
        assert body["data"] == WITCHER
        assert service.calls == [("get_game_details", (292030,))]

    async def test_game_not_found(self, make_client):
        client = await make_client(StubSteamService(get_game_details=None))
        response = await client.get("/api/games/1")
        assert response.status == 404
        body = await response.json()
        assert body["success"] is False
        assert body["error"] == "Game not found"


class TestSteamRoutes:

    async def test_app_list(self, client):
        body = await (await client.get("/api/steam/apps")).json()
        assert body["data"] == [{"appid": 10, "name": "Counter-Strike"}]
        assert body["count"] == 1

    async def test_top_sellers_parameters(self, client, service):
        response = await client.get("/api/steam/top-sellers", params={"country_code": "CN", "page_count": "5"})
        body = await response.json()
        assert body["count"] == 1
        assert service.calls == [("get_store_top_sellers", ("CN", 0, 5, "english"))]

    async def test_concurrent_chart(self, client, service):
        body = await (await client.get("/api/steam/charts/concurrent")).json()
        assert body["data"]["ranks"][0]["concurrent_in_game"] == 1000
        assert service.calls == [("get_games_by_concurrent_players", ("english", "US"))]

    async def test_current_players(self, client):
        body = await (await client.get("/api/steam/players/730")).json()
        assert body["data"] == {"appid": 730, "player_count": 4321}

    async def test_community_page_is_html(self, client, service):
        response = await client.get("/api/steam/community/3117820", params={"section": "discussions"})
        assert response.status == 200
        assert response.content_type == "text/html"
        assert "社区" in await response.text()
        assert service.calls == [("get_game_community_html", (3117820, "discussions"))]

    async def test_community_section_is_validated(self, client):
        response = await client.get("/api/steam/community/3117820", params={"section": "../../etc"})
        assert response.status == 400


class TestErrors:

    async def test_unknown_path(self, client):
        response = await client.get("/api/nothing-here")
        assert response.status == 404
        body = await response.json()
        assert body["error"] == "Not Found"
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    async def test_non_numeric_appid_is_not_a_route(self, client):
        assert (await client.get("/api/games/abc")).status == 404

    async def test_method_not_allowed(self, client):
        response = await client.delete("/api/games/popular")
        assert response.status == 405
        assert (await response.json())["error"] == "Method Not Allowed"

    async def test_upstream_error_keeps_its_status(self, make_client):
        client = await make_client(StubSteamService(get_all_games=SteamApiError(503, "Unable to fetch the Steam app list")))
        response = await client.get("/api/steam/apps")
        assert response.status == 503
        body = await response.json()
        assert body["error"] == "SteamApiError"
        assert body["message"] == "Steam API Error: Unable to fetch the Steam app list"
        assert "appid" not in body

    async def test_upstream_error_names_the_app(self, make_client):
        failure = SteamApiError(404, "No player count available", appid=730)
        client = await make_client(StubSteamService(get_number_of_current_players=failure))
        response = await client.get("/api/steam/players/730")
        assert response.status == 404
        assert await response.json() == {
            "success": False,
            "error": "SteamApiError",
            "message": "Steam API Error: No player count available",
            "appid": 730,
        }

    async def test_rate_limit_is_429(self, make_client):
        client = await make_client(StubSteamService(get_number_of_current_players=RateLimitError()))
        assert (await client.get("/api/steam/players/730")).status == 429

    async def test_unexpected_error_is_hidden_outside_development(self, make_client):
        client = await make_client(StubSteamService(get_popular_games=RuntimeError("secret detail")))
        response = await client.get("/api/games/popular")
        assert response.status == 500
        body = await response.json()
        assert body["error"] == "Internal Server Error"
        assert "secret detail" not in body["message"]

    async def test_unexpected_error_detail_in_development(self, make_client):
        client = await make_client(StubSteamService(get_popular_games=RuntimeError("secret detail")), app_env="development")
        body = await (await client.get("/api/games/popular")).json()
        assert body["message"] == "secret detail"


class TestLocalGames:

    async def test_create_and_update(self, client):
        response = await client.post("/api/games", json={"appid": 400, "name": "Portal"})
        assert response.status == 201
        body = await response.json()
        assert body["data"]["appid"] == 400
        assert body["data"]["last_fetched_at"]

        response = await client.put("/api/games/400", json={"name": "Portal 2"})
        assert response.status == 200
        assert (await response.json())["data"]["name"] == "Portal 2"

    async def test_create_with_trailing_slash(self, client):
        assert (await client.post("/api/games/", json={"appid": 1, "name": "One"})).status == 201

    async def test_create_validation(self, client):
        response = await client.post("/api/games", json={"appid": -1, "name": ""})
        assert response.status == 400
        message = (await response.json())["message"]
        assert "appid" in message
        assert "name" in message

    async def test_invalid_json_body(self, client):
        response = await client.post("/api/games", data="{oops", headers={"Content-Type": "application/json"})
        assert response.status == 400

    async def test_update_unknown_game(self, client):
        response = await client.put("/api/games/999", json={"name": "Ghost"})
        assert response.status == 404
        assert (await response.json())["error"] == "Game not found"

    async def test_batch_insert(self, client):
        games = [{"appid": 10, "name": "Counter-Strike"}, {"appid": 20, "name": "Team Fortress Classic"}]
        response = await client.post("/api/games/batch", json={"games": games})
        assert response.status == 201
        body = await response.json()
        assert body["count"] == 2
        assert [game["appid"] for game in body["data"]] == [10, 20]

    async def test_batch_accepts_bare_list(self, client):
        response = await client.post("/api/games/batch", json=[{"appid": 10, "name": "Counter-Strike"}])
        assert response.status == 201

    async def test_batch_limits(self, client):
        assert (await client.post("/api/games/batch", json={"games": []})).status == 400
        too_many = [{"appid": appid, "name": f"Game {appid}"} for appid in range(1, 102)]
        assert (await client.post("/api/games/batch", json={"games": too_many})).status == 400

    async def test_query_and_listing(self, client, db):
        db.upsert_games([{"appid": 10, "name": "Counter-Strike"}, {"appid": 400, "name": "Portal"}])

        body = await (await client.get("/api/games/query", params={"name": "Port"})).json()
        assert [game["appid"] for game in body["data"]] == [400]

        body = await (await client.get("/api/games/query", params={"appid": "10"})).json()
        assert body["data"][0]["name"] == "Counter-Strike"

        body = await (await client.get("/api/games/local", params={"limit": "1", "offset": "1"})).json()
        assert body["count"] == 1

    async def test_query_requires_appid_or_name(self, client):
        response = await client.get("/api/games/query")
        assert response.status == 400
        assert "appid or name" in (await response.json())["message"]
