from aiohttp import web

from TileLive import get_logger
from TileLive.config import Server
from TileLive.context import ServerContext
from TileLive.helpers.catalog import StreamCatalog
from TileLive.helpers.supervisor import StreamSupervisor
from TileLive.helpers.sync import SyncHub
from .keys import CONTEXT, CATALOG, HUB, SUPERVISOR
from .routes import setup_routes
from .middleware import cors_middleware_factory

LOGGER = get_logger(__name__)


def create_app(
    ctx: ServerContext,
    supervisor: StreamSupervisor,
    hub: SyncHub,
    cors_origin: str = Server.CORS_ORIGIN,
) -> web.Application:
    app = web.Application(middlewares=[cors_middleware_factory(cors_origin)])

    app[CONTEXT] = ctx
    app[CATALOG] = supervisor.catalog
    app[HUB] = hub
    app[SUPERVISOR] = supervisor

    async def close_viewers(app: web.Application):
        await app[HUB].close_all()

    app.on_shutdown.append(close_viewers)

    setup_routes(app)
    return app


async def start_server(app: web.Application, host: str = Server.BIND_HOST, port: int = Server.PORT):
    runner = web.AppRunner(app)
    await runner.setup()

    site = web.TCPSite(runner, host, port)
    await site.start()

    LOGGER.info("Server running at http://%s:%s", host, port)
    return runner


async def stop_server(runner: web.AppRunner):
    if runner is not None:
        await runner.cleanup()
