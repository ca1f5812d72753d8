import asyncio
import signal

from TileLive import setup_logging, get_logger, __title__, __version__, Server
from TileLive.context import ServerContext
from TileLive.helpers.catalog import StreamCatalog
from TileLive.helpers.ext_utils import clean_hls_folder, ensure_dir
from TileLive.helpers.ffmpeg import stop_all_ffmpeg
from TileLive.helpers.supervisor import StreamSupervisor, RestartPolicy
from TileLive.helpers.sync import SyncHub
from TileLive.web.server import create_app, start_server, stop_server


async def idle():
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # Windows: KeyboardInterrupt still ends asyncio.run
            pass

    await stop.wait()


async def main():
    setup_logging()
    logger = get_logger(__name__)
    logger.info("Starting %s version %s...", __title__, __version__)

    ctx = ServerContext.from_config()
    policy = RestartPolicy.from_config()

    if Server.CLEAN_HLS_ON_START:
        clean_hls_folder(ctx.hls_root)
    ensure_dir(ctx.hls_root)

    catalog = StreamCatalog(ctx)
    supervisor = StreamSupervisor(ctx, catalog, policy=policy)
    hub = SyncHub(ctx)

    await supervisor.start()

    app = create_app(ctx, supervisor, hub)
    runner = await start_server(app)
    logger.info("HLS root: %s", ctx.hls_root)

    try:
        await idle()
    finally:
        logger.info("Shutting down...")
        await stop_server(runner)
        await supervisor.stop()
        await stop_all_ffmpeg()


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
