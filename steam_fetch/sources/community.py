# ===== IMPORTS & DEPENDENCIES =====
import logging
import random
from http.cookies import SimpleCookie
from typing import Dict, Iterator, Mapping, Optional, Tuple

import aiohttp
from yarl import URL

from steam_fetch.config import (
    AGE_GATE_FORM, AGE_GATE_SIGNATURES, AGECHECK_BYPASS_SNR, BROWSER_HEADERS,
    MATURE_BIRTHTIME, STEAM_AGECHECK_SET_URL, STEAM_COMMUNITY_APP_URL
)
from steam_fetch.core.base_client import FetchResponse, SteamFetchClient

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

COMMUNITY_DOMAIN = "steamcommunity.com"
STORE_DOMAIN = "store.steampowered.com"
LAST_AGECHECK_AGE = "{ageDay}-{ageMonth}-{ageYear}".format(**AGE_GATE_FORM)


# ===== HELPER FUNCTIONS =====
def is_age_verification_page(html: str) -> bool:
    """True when the page is Steam's age check or mature-content interstitial."""
    return any(signature in html for signature in AGE_GATE_SIGNATURES)


def community_url(appid: int, section: Optional[str] = None) -> str:
    url = STEAM_COMMUNITY_APP_URL.format(app_id=appid)
    if section:
        url += "/" + section.strip("/")
    return url


def _mature_cookie_specs(appid: int) -> Iterator[Tuple[str, str, Dict[str, str]]]:
    """(domain, path, cookies) groups that mark the visitor as an adult who opted in."""
    adult = {
        "birthtime": MATURE_BIRTHTIME,
        "lastagecheckage": LAST_AGECHECK_AGE,
        "mature_content": "1",
    }
    app_path = f"/app/{appid}"
    yield COMMUNITY_DOMAIN, "/", {"wants_mature_content": "1", **adult}
    yield COMMUNITY_DOMAIN, app_path, {"wants_mature_content_apps": str(appid)}
    yield STORE_DOMAIN, "/", adult
    yield STORE_DOMAIN, app_path, {f"app_agecheck_{appid}": "1"}


def build_cookie_jar(appid: int) -> aiohttp.CookieJar:
    """
    A fresh jar holding the mature-content cookies for one fetch.
    Must be called from inside a running event loop.
    """
    jar = aiohttp.CookieJar()
    for domain, path, values in _mature_cookie_specs(appid):
        cookies = SimpleCookie()
        for name, value in values.items():
            cookies[name] = value
            cookies[name]["domain"] = domain
            cookies[name]["path"] = path
        jar.update_cookies(cookies, response_url=URL(f"https://{domain}{path}"))
    return jar


def cookies_for(jar: aiohttp.CookieJar, url: str) -> Dict[str, str]:
    """The cookies the jar would send to `url`, as a plain name -> value mapping."""
    return {name: morsel.value for name, morsel in jar.filter_cookies(URL(url)).items()}


# ===== CORE BUSINESS LOGIC =====
class CommunityPageFetcher:
    """
    Fetches a Steam Community app page, getting past the age gate when one
    is served.

    Flow: GET the page with mature cookies. If an interstitial comes back,
    retry with the age-gate `snr` marker; if that still fails, submit the
    store's age check form and GET the page once more, returning whatever
    arrives. Each call keeps its own cookie jar, so nothing leaks between
    apps or concurrent calls.
    """

    def __init__(self, client: SteamFetchClient, rng: Optional[random.Random] = None):
        self._client = client
        self._rng = rng or random.Random()

    def _session_id(self) -> str:
        return f"{self._rng.getrandbits(96):024x}"

    async def _get(self, url: str, jar: aiohttp.CookieJar, params: Optional[Mapping[str, str]] = None) -> FetchResponse:
        return await self._client.fetch(
            url,
            headers=BROWSER_HEADERS,
            cookies=cookies_for(jar, url),
            params=params,
        )

    async def _submit_age_form(self, appid: int, jar: aiohttp.CookieJar, referer: str) -> None:
        url = STEAM_AGECHECK_SET_URL.format(app_id=appid)
        session_id = self._session_id()
        logger.info(f"[{self.__class__.__name__}] Submitting age check form for appid={appid}")
        response = await self._client.fetch(
            url,
            method='POST',
            headers={**BROWSER_HEADERS, 'Referer': referer},
            cookies={**cookies_for(jar, url), "sessionid": session_id},
            data={"sessionid": session_id, **AGE_GATE_FORM},
        )
        response.raise_for_status()

    async def fetch(self, appid: int, section: Optional[str] = None) -> str:
        url = community_url(appid, section)
        jar = build_cookie_jar(appid)

        response = await self._get(url, jar)
        response.raise_for_status()
        html = response.text()
        if not is_age_verification_page(html):
            return html

        logger.info(f"[{self.__class__.__name__}] Age gate served for appid={appid}, retrying with bypass marker.")
        retry = await self._get(url, jar, params={"snr": AGECHECK_BYPASS_SNR})
        if retry.ok:
            retry_html = retry.text()
            if not is_age_verification_page(retry_html):
                logger.info(f"✅ [{self.__class__.__name__}] Age gate bypassed for appid={appid}")
                return retry_html

        await self._submit_age_form(appid, jar, referer=url)
        final = await self._get(url, jar)
        final.raise_for_status()
        return final.text()
