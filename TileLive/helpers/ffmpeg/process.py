import asyncio
import re
from typing import AsyncIterator

from TileLive import get_logger
from TileLive.helpers.ext_utils import EncoderSpawnError
from .registry import FFMPEG_PROCS

LOGGER = get_logger(__name__)

# ffmpeg ends progress lines with \r, everything else with \n
LINE_SPLIT = re.compile(rb"[\r\n]+")
READ_SIZE = 4096


class FFmpegProcess:
    """One encoder worker. Output goes straight to disk; only the log text is piped back."""

    def __init__(self, cmd: list[str], stream_name: str):
        self.cmd = cmd
        self.stream_name = stream_name
        self.proc: asyncio.subprocess.Process | None = None

    @property
    def pid(self) -> int | None:
        return self.proc.pid if self.proc else None

    async def start(self):
        try:
            self.proc = await asyncio.create_subprocess_exec(
                *self.cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            raise EncoderSpawnError(self.stream_name, e) from e

        FFMPEG_PROCS.add(self.proc)

        LOGGER.info(
            "[%s] ffmpeg started (pid=%s)",
            self.stream_name,
            self.proc.pid,
        )

    async def lines(self) -> AsyncIterator[str]:
        buffer = b""

        while True:
            chunk = await self.proc.stdout.read(READ_SIZE)
            if not chunk:
                break

            *complete, buffer = LINE_SPLIT.split(buffer + chunk)
            for raw in complete:
                line = raw.decode(errors="ignore").strip()
                if line:
                    yield line

        tail = buffer.decode(errors="ignore").strip()
        if tail:
            yield tail

    async def wait(self) -> int | None:
        code = await self.proc.wait()
        FFMPEG_PROCS.discard(self.proc)
        return code

    async def stop(self, timeout: float = 5):
        if not self.proc or self.proc.returncode is not None:
            return

        LOGGER.info("[%s] stopping ffmpeg", self.stream_name)

        try:
            self.proc.terminate()
        except ProcessLookupError:
            pass

        try:
            await asyncio.wait_for(self.proc.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            LOGGER.warning(
                "[%s] force killing ffmpeg pid=%s", self.stream_name, self.proc.pid
            )
            self.proc.kill()
            await self.proc.wait()

        FFMPEG_PROCS.discard(self.proc)
        LOGGER.info("[%s] ffmpeg stopped", self.stream_name)
