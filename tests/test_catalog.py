import asyncio

import pytest

from fakes import FakeFetchClient, response
from html_pages import SEARCH_RESULTS_HTML
from steam_fetch.config import STEAM_SEARCH_URL
from steam_fetch.core.errors import NetworkError
from steam_fetch.sources.catalog import CatalogQuery, extract_app_ids


def search_page(*appids):
    rows = "".join(f'<a href="https://store.steampowered.com/app/{appid}/x/" class="search_result_row">{appid}</a>' for appid in appids)
    return f"<html><body><div id='search_resultsRows'>{rows}</div></body></html>"


def game(appid, discount=None, on_sale=False):
    record = {"appid": appid, "name": f"Game {appid}", "is_on_sale": on_sale, "is_free": False,
              "is_upcoming": False, "is_early_access": False}
    if discount is not None:
        record["discount_percentage"] = discount
    return record


class DetailsTable:
    """get_game_details stand-in answering from a dict; exceptions in it are raised."""

    def __init__(self, records):
        self.records = records
        self.requested = []

    async def __call__(self, appid):
        self.requested.append(appid)
        result = self.records.get(appid)
        if isinstance(result, BaseException):
            raise result
        return result


@pytest.fixture
def client():
    return FakeFetchClient()


def test_extract_app_ids_accepts_any_attribute_order():
    assert extract_app_ids(SEARCH_RESULTS_HTML, 10) == [292030, 730, 1091500]


def test_extract_app_ids_respects_limit():
    assert extract_app_ids(SEARCH_RESULTS_HTML, 2) == [292030, 730]
    assert extract_app_ids(SEARCH_RESULTS_HTML, 0) == []


def test_extract_app_ids_ignores_other_links():
    html = '<a href="/app/1/x/" class="search_result_row_hint"></a><a class="tab" href="/app/2/"></a>'
    assert extract_app_ids(html, 10) == []


async def test_popular_games_keep_search_order(client):
    client.on(STEAM_SEARCH_URL, search_page(3, 1, 2))
    details = DetailsTable({1: game(1), 2: game(2), 3: game(3)})

    games = await CatalogQuery(client, details).get_popular_games(limit=20)
    assert [record["appid"] for record in games] == [3, 1, 2]
    assert client.calls[0].params == {"sort_by": "_ASC", "supportedlang": "schinese", "ndl": "1"}


async def test_limit_bounds_detail_lookups(client):
    client.on(STEAM_SEARCH_URL, search_page(1, 2, 3, 4))
    details = DetailsTable({appid: game(appid) for appid in (1, 2, 3, 4)})

    games = await CatalogQuery(client, details).get_upcoming_games(limit=2)
    assert len(games) == 2
    assert details.requested == [1, 2]


async def test_detail_lookups_never_overlap(client):
    client.on(STEAM_SEARCH_URL, search_page(1, 2, 3, 4))
    in_flight = 0
    peak = 0

    async def slow_details(appid):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        in_flight -= 1
        return game(appid)

    games = await CatalogQuery(client, slow_details).get_popular_games(limit=4)
    assert [record["appid"] for record in games] == [1, 2, 3, 4]
    assert peak == 1


async def test_discounted_games_sorted_by_discount(client):
    client.on(STEAM_SEARCH_URL, search_page(1, 2, 3, 4, 5))
    details = DetailsTable({
        1: game(1, "10", on_sale=True),
        2: game(2, "50", on_sale=True),
        3: game(3, "25", on_sale=True),
        4: game(4),
        5: game(5, "25", on_sale=True),
    })

    games = await CatalogQuery(client, details).get_discounted_games(limit=50)
    assert [record["appid"] for record in games] == [2, 3, 5, 1]
    assert client.calls[0].params["specials"] == "1"


async def test_discount_without_percentage_sorts_last(client):
    client.on(STEAM_SEARCH_URL, search_page(1, 2))
    details = DetailsTable({1: game(1, on_sale=True), 2: game(2, "5", on_sale=True)})

    games = await CatalogQuery(client, details).get_discounted_games()
    assert [record["appid"] for record in games] == [2, 1]


async def test_failing_or_missing_games_are_left_out(client):
    client.on(STEAM_SEARCH_URL, search_page(1, 2, 3))
    details = DetailsTable({1: game(1), 2: RuntimeError("boom"), 3: None})

    games = await CatalogQuery(client, details).search_games("witcher")
    assert [record["appid"] for record in games] == [1]
    assert details.requested == [1, 2, 3]


async def test_failed_search_gives_empty_list(client):
    client.on(STEAM_SEARCH_URL, NetworkError(STEAM_SEARCH_URL, OSError("down")))
    details = DetailsTable({})
    assert await CatalogQuery(client, details).get_popular_games() == []
    assert details.requested == []


async def test_non_ok_search_gives_empty_list(client):
    client.on(STEAM_SEARCH_URL, response(STEAM_SEARCH_URL, "", status=502, reason="Bad Gateway"))
    assert await CatalogQuery(client, DetailsTable({})).get_discounted_games() == []


async def test_search_sends_term_and_language(client):
    client.on(STEAM_SEARCH_URL, search_page())
    await CatalogQuery(client, DetailsTable({})).search_games("巫师 3")
    assert client.calls[0].params == {"term": "巫师 3", "l": "schinese"}


@pytest.mark.parametrize("category, expected", [
    ("rpg", {"category1": "122", "l": "schinese"}),
    ("RPG", {"category1": "122", "l": "schinese"}),
    ("free", {"genre": "Free to Play", "l": "schinese"}),
    ("roguelike", {"term": "roguelike", "l": "schinese"}),
])
async def test_category_filters(client, category, expected):
    client.on(STEAM_SEARCH_URL, search_page())
    await CatalogQuery(client, DetailsTable({})).get_games_by_category(category)
    assert client.calls[0].params == expected
