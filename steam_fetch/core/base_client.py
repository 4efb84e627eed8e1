# ===== IMPORTS & DEPENDENCIES =====
import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import aiohttp

from steam_fetch.config import HTTP_TIMEOUT, JSON_HEADERS
from steam_fetch.core.errors import HttpError, MalformedUpstreamError, NetworkError, RateLimitError

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)


# ===== TYPES & INTERFACES =====
@dataclass(frozen=True)
class FetchResponse:
    """A fully read HTTP response, detached from the aiohttp connection."""
    url: str
    status: int
    reason: str
    body: bytes
    encoding: str = "utf-8"

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self) -> str:
        return self.body.decode(self.encoding, errors="replace")

    def json(self) -> Any:
        try:
            return json.loads(self.body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedUpstreamError(f"Invalid JSON from {self.url}: {e}") from e

    def raise_for_status(self) -> None:
        """Raises RateLimitError for 429 and HttpError for any other non-2xx status."""
        if self.ok:
            return
        message = f"HTTP {self.status} {self.reason} for {self.url}"
        if self.status == 429:
            raise RateLimitError(message)
        raise HttpError(self.status, message)


def create_session(timeout: float = HTTP_TIMEOUT) -> aiohttp.ClientSession:
    """
    Builds the shared outbound session.
    Cookies are never persisted between requests; callers pass them explicitly.
    """
    return aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=timeout),
        cookie_jar=aiohttp.DummyCookieJar(),
    )


# ===== CORE BUSINESS LOGIC =====
class SteamFetchClient:
    """Issues outbound requests and turns failures into typed errors."""

    def __init__(self, session: aiohttp.ClientSession):
        self._session = session

    async def fetch(
        self,
        url: str,
        method: str = 'GET',
        headers: Optional[Mapping[str, str]] = None,
        cookies: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, str]] = None,
        data: Optional[Mapping[str, str]] = None
    ) -> FetchResponse:
        """
        Performs a single request and reads the whole body.
        The status is NOT checked here; transport failures raise NetworkError.
        """
        logger.debug(f"➡️ [{self.__class__.__name__}] {method} {url} params={dict(params or {})}")
        try:
            async with self._session.request(
                method,
                url,
                headers=dict(headers or JSON_HEADERS),
                cookies=dict(cookies) if cookies else None,
                params=dict(params) if params else None,
                data=dict(data) if data else None
            ) as response:
                body = await response.read()
                return FetchResponse(
                    url=str(response.url),
                    status=response.status,
                    reason=response.reason or "",
                    body=body,
                    encoding=response.charset or "utf-8",
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"⚠️ [{self.__class__.__name__}] Network error on {url}: {type(e).__name__}")
            raise NetworkError(url, e) from e

    async def fetch_checked(self, url: str, **kwargs: Any) -> FetchResponse:
        """Like fetch(), but raises HttpError/RateLimitError on a non-2xx status."""
        response = await self.fetch(url, **kwargs)
        if not response.ok:
            logger.warning(f"⚠️ [{self.__class__.__name__}] HTTP error on {url}: Status {response.status}")
        response.raise_for_status()
        return response

    async def fetch_text(self, url: str, **kwargs: Any) -> str:
        return (await self.fetch_checked(url, **kwargs)).text()

    async def fetch_json(self, url: str, **kwargs: Any) -> Any:
        return (await self.fetch_checked(url, **kwargs)).json()

    async def fetch_bytes(self, url: str, **kwargs: Any) -> bytes:
        return (await self.fetch_checked(url, **kwargs)).body
