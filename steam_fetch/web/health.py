import time
from datetime import datetime, timezone

from aiohttp import web

from steam_fetch.web.common import SETTINGS_KEY, STARTED_AT_KEY, json_payload

routes = web.RouteTableDef()


@routes.get("/health")
async def health_check(request: web.Request) -> web.Response:
    return json_payload({
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": request.app[SETTINGS_KEY].version,
        "uptime": round(time.monotonic() - request.app[STARTED_AT_KEY], 3),
    })
