from typing import AsyncIterator, Protocol

from .process import FFmpegProcess


class EncoderHandle(Protocol):
    """
    A running encoder worker as seen by the supervisor.

    Rules:
    - lines() ends when the worker closes its output
    - wait() resolves exactly once per process, with its exit code
    """

    @property
    def pid(self) -> int | None:
        ...

    def lines(self) -> AsyncIterator[str]:
        ...

    async def wait(self) -> int | None:
        ...

    async def stop(self, timeout: float = 5):
        ...


class ProcessSpawner(Protocol):
    async def spawn(self, stream_name: str, cmd: list[str]) -> EncoderHandle:
        """
        Start a worker. Raises EncoderSpawnError if the OS refuses.
        """
        ...


class FFmpegSpawner:
    async def spawn(self, stream_name: str, cmd: list[str]) -> FFmpegProcess:
        ff = FFmpegProcess(cmd, stream_name)
        await ff.start()
        return ff
