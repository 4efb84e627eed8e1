from datetime import datetime, timezone

import pytest

from html_pages import (
    CS2_HTML, CYBERPUNK_HTML, EARLY_ACCESS_HTML, ISLAND_HTML, MALFORMED_ISLAND_HTML,
    NESTED_MARKUP_HTML, NOT_FOUND_HTML, WITCHER3_HTML
)
from steam_fetch.scraping.extractors import DomExtractor, RegexExtractor, extractor_for, inner_markup, select_extractor
from steam_fetch.scraping.page_scraper import PageScraper
from steam_fetch.scraping.rules import STORE_PAGE_RULES, class_attribute, class_text, first_child_text, labelled_link

FIXED_NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)

PAGES = {
    "witcher3": (WITCHER3_HTML, 292030),
    "cs2": (CS2_HTML, 730),
    "cyberpunk": (CYBERPUNK_HTML, 1091500),
    "early_access": (EARLY_ACCESS_HTML, 1145350),
    "island": (ISLAND_HTML, 400),
    "malformed_island": (MALFORMED_ISLAND_HTML, 400),
    "nested_markup": (NESTED_MARKUP_HTML, 220),
    "not_found": (NOT_FOUND_HTML, 999999),
}


def test_select_extractor_follows_capability_flag():
    assert isinstance(select_extractor(True), DomExtractor)
    assert isinstance(select_extractor(False), RegexExtractor)


@pytest.mark.parametrize("strategy, expected", [
    ("dom", DomExtractor),
    ("DOM", DomExtractor),
    ("regex", RegexExtractor),
    (None, DomExtractor),
])
def test_extractor_for_strategy_name(strategy, expected):
    assert isinstance(extractor_for(strategy), expected)


@pytest.mark.parametrize("page", sorted(PAGES))
def test_dom_and_regex_strategies_scrape_identically(page):
    html, appid = PAGES[page]
    dom = PageScraper(DomExtractor(), clock=lambda: FIXED_NOW).scrape(html, appid)
    regex = PageScraper(RegexExtractor(), clock=lambda: FIXED_NOW).scrape(html, appid)
    assert dom == regex


@pytest.mark.parametrize("extractor", [DomExtractor(), RegexExtractor()], ids=["dom", "regex"])
def test_nested_elements_of_the_same_tag_stay_whole(extractor):
    record = PageScraper(extractor, clock=lambda: FIXED_NOW).scrape(NESTED_MARKUP_HTML, 220)
    assert record["detailed_description"] == "About This Game Intro The rest of the story."
    assert record["legal_notice"] == "© Valve Corporation. All rights reserved."
    assert record["achievement_count"] == "33"
    assert record["release_date"] == "2004年11月16日"


def test_inner_markup_balances_nested_tags():
    document = '<div id="a"><div>one<div/>two</div>three</div><div>after</div>'
    start = document.index(">") + 1
    assert inner_markup(document, start, "div") == "<div>one<div/>two</div>three"


def test_inner_markup_of_unclosed_element_runs_to_the_end():
    assert inner_markup("<p>open <p>still", 3, "p") == "open <p>still"


@pytest.mark.parametrize("rule", STORE_PAGE_RULES, ids=lambda rule: f"{rule.field}:{rule.selector}")
def test_every_rule_agrees_across_strategies(rule):
    dom, regex = DomExtractor(), RegexExtractor()
    for html, _ in PAGES.values():
        assert dom.extract(dom.parse(html), rule) == regex.extract(regex.parse(html), rule)


@pytest.mark.parametrize("extractor", [DomExtractor(), RegexExtractor()], ids=["dom", "regex"])
class TestRuleShapes:

    def test_single_rule_takes_first_non_empty_match(self, extractor):
        html = '<div class="date"> </div><div class="date">May 18, 2015</div><div class="date">later</div>'
        rule = class_text("release_date", "div", "date")
        assert extractor.extract(extractor.parse(html), rule) == "May 18, 2015"

    def test_class_must_match_a_whole_token(self, extractor):
        html = '<div class="release_date">outer</div><div class="date_picker">no</div>'
        rule = class_text("release_date", "div", "date")
        assert extractor.extract(extractor.parse(html), rule) is None

    def test_multiple_rule_deduplicates_in_page_order(self, extractor):
        html = '<a class="app_tag">RPG</a><a class="app_tag"> Indie </a><a class="app_tag">RPG</a>'
        rule = class_text("tags", "a", "app_tag", multiple=True)
        assert extractor.extract(extractor.parse(html), rule) == ["RPG", "Indie"]

    def test_attribute_rule_reads_attribute_and_decodes_entities(self, extractor):
        html = '<img src="https://cdn.example/header.jpg?t=1&amp;v=2" class="game_header_image_full">'
        rule = class_attribute("header_image", "img", "game_header_image_full", "src")
        assert extractor.extract(extractor.parse(html), rule) == "https://cdn.example/header.jpg?t=1&v=2"

    def test_text_rule_decodes_entities_and_strips_tags(self, extractor):
        html = '<div class="game_description_snippet">Rock &amp; <b>Roll</b>\n  forever</div>'
        rule = class_text("short_description", "div", "game_description_snippet")
        assert extractor.extract(extractor.parse(html), rule) == "Rock & Roll forever"

    def test_labelled_link_stays_inside_its_row(self, extractor):
        html = (
            '<div class="dev_row"><b>Developer:</b><a href="#">Studio A</a></div>'
            '<div class="dev_row"><b>Publisher:</b><a href="#">Label B</a></div>'
        )
        publisher = labelled_link("publisher", "dev_row", ("Publisher", "发行商"))
        developer = labelled_link("developer", "dev_row", ("Developer", "开发商"))
        document = extractor.parse(html)
        assert extractor.extract(document, developer) == "Studio A"
        assert extractor.extract(document, publisher) == "Label B"

    def test_first_child_rule(self, extractor):
        html = (
            '<div id="achievement_block"><div class="block_title">Includes 42 Steam Achievements</div>'
            '<div class="block_title">other</div></div>'
        )
        rule = first_child_text("achievement_count", "achievement_block", "block_title")
        assert extractor.extract(extractor.parse(html), rule) == "Includes 42 Steam Achievements"

    def test_missing_element_gives_none(self, extractor):
        rule = class_text("tags", "a", "app_tag", multiple=True)
        assert extractor.extract(extractor.parse(NOT_FOUND_HTML), rule) is None
