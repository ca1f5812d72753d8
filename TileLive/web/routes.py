from aiohttp import web
from .views import (
    status_page,
    list_streams,
    stream_status,
    handle_hls,
    sync_socket,
)


def setup_routes(app: web.Application):
    app.router.add_get("/", status_page)
    app.router.add_get("/streams", list_streams)
    app.router.add_get("/status", stream_status)
    app.router.add_get("/hls/{path:.*}", handle_hls)
    app.router.add_get("/ws", sync_socket)
