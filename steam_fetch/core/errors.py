# ===== TYPES & INTERFACES =====
from typing import Any, Dict, Optional


class SteamFetchError(Exception):
    """Base class for every failure raised while talking to Steam."""


class HttpError(SteamFetchError):
    """A non-2xx HTTP response from an upstream service."""

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message

    def is_client_error(self) -> bool:
        return 400 <= self.status < 500

    def is_server_error(self) -> bool:
        return 500 <= self.status < 600

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.__class__.__name__,
            "status": self.status,
            "message": self.message,
        }


class RateLimitError(HttpError):
    """HTTP 429 from Steam. Never retried automatically."""

    def __init__(self, message: str = "Too many requests, please retry later"):
        super().__init__(429, message)


class SteamApiError(HttpError):
    """A Steam Web API call failed or returned an unusable payload."""

    def __init__(self, status: int, message: str, appid: Optional[int] = None):
        super().__init__(status, f"Steam API Error: {message}")
        self.appid = appid

    def to_dict(self) -> Dict[str, Any]:
        error = super().to_dict()
        if self.appid is not None:
            error["appid"] = self.appid
        return error


class NetworkError(SteamFetchError):
    """The request never produced an HTTP response (DNS, connect, timeout...)."""

    def __init__(self, url: str, cause: BaseException):
        super().__init__(f"Network error on {url}: {type(cause).__name__}: {cause}")
        self.url = url
        self.cause = cause


class MalformedUpstreamError(SteamFetchError):
    """Upstream answered, but the payload could not be decoded."""
