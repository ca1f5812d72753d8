import asyncio

# every encoder process that has been started and not yet reaped
FFMPEG_PROCS: set[asyncio.subprocess.Process] = set()
