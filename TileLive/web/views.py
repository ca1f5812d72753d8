"""
HTTP and realtime endpoints.

The realtime channel at /ws is a plain websocket, not socket.io. Every frame
is one JSON text message {"event": <name>, "data": <object>}:

    server -> viewer   server-info {"serverStart": <epoch ms>}   once, first
    server -> viewer   clock       {"now": <epoch ms>}           every beacon interval
    both ways          sync-update {"isPlaying", "time", "lastUpdate"}

socket.io clients (`io(...)`, `socket.on(...)`) cannot connect to it; use a
WebSocket and send/parse the frames above.
"""
import os
from time import time

from aiohttp import web, WSMsgType

from TileLive import get_logger, START_TIME, __title__, __version__
from TileLive.helpers.ext_utils import InvalidEvent, get_readable_time
from TileLive.helpers.sync import encode_event
from .keys import CONTEXT, CATALOG, HUB, SUPERVISOR

LOGGER = get_logger(__name__)

# segments are rewritten and pruned continuously
NO_CACHE = "no-cache, no-store, must-revalidate"

CONTENT_TYPES = {
    ".m3u8": "application/vnd.apple.mpegurl",
    ".ts": "video/mp2t",
}


async def status_page(request: web.Request) -> web.Response:
    uptime = get_readable_time(time() - START_TIME)
    return web.Response(
        text=f"{__title__} {__version__} is running | uptime {uptime}"
    )


async def list_streams(request: web.Request) -> web.Response:
    return web.json_response(request.app[CATALOG].list_streams())


async def stream_status(request: web.Request) -> web.Response:
    ctx = request.app[CONTEXT]
    return web.json_response(
        {
            "serverStart": ctx.server_start,
            "now": ctx.now(),
            "viewers": request.app[HUB].session_count,
            "slots": request.app[SUPERVISOR].snapshot(),
        }
    )


async def handle_hls(request: web.Request) -> web.StreamResponse:
    hls_root = request.app[CONTEXT].hls_root
    rel_path = request.match_info.get("path", "").lstrip("/")

    # Prevent directory traversal
    if ".." in rel_path.split("/"):
        return web.Response(status=400, text="Invalid path")

    abs_path = os.path.abspath(os.path.join(hls_root, rel_path))

    if os.path.commonpath([abs_path, hls_root]) != hls_root:
        return web.Response(status=403, text="Access denied")

    if not os.path.isfile(abs_path):
        return web.Response(status=404, text="File not found")

    headers = {"Cache-Control": NO_CACHE}
    content_type = CONTENT_TYPES.get(os.path.splitext(abs_path)[1])
    if content_type:
        headers["Content-Type"] = content_type

    return web.FileResponse(abs_path, headers=headers)


async def sync_socket(request: web.Request) -> web.WebSocketResponse:
    hub = request.app[HUB]

    ws = web.WebSocketResponse(heartbeat=30)
    await ws.prepare(request)

    async def send(event: str, data: dict):
        await ws.send_str(encode_event(event, data))

    session = await hub.connect(send, close=ws.close)

    try:
        async for msg in ws:
            if msg.type == WSMsgType.TEXT:
                try:
                    await hub.handle_message(session.id, msg.data)
                except InvalidEvent as e:
                    LOGGER.warning("[%s] dropped frame: %s", session.id, e)

            elif msg.type == WSMsgType.ERROR:
                LOGGER.warning(
                    "[%s] connection error: %s", session.id, ws.exception()
                )
    finally:
        await hub.disconnect(session.id)

    return ws
