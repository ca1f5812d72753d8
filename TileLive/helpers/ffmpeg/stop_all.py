import asyncio

from TileLive import get_logger
from .registry import FFMPEG_PROCS

LOGGER = get_logger(__name__)


async def stop_all_ffmpeg(timeout: float = 5):
    LOGGER.info("[FFMPEG] stopping all ffmpeg processes")

    procs = list(FFMPEG_PROCS)
    FFMPEG_PROCS.clear()

    for proc in procs:
        if proc.returncode is not None:
            continue
        try:
            proc.terminate()
        except ProcessLookupError:
            pass

    for proc in procs:
        try:
            await asyncio.wait_for(proc.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            LOGGER.warning(
                "[FFMPEG] force killing ffmpeg pid=%s", proc.pid
            )
            proc.kill()
            await proc.wait()

    LOGGER.info("[FFMPEG] all ffmpeg processes stopped")
