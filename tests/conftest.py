import asyncio
import itertools

import pytest

from TileLive.context import ServerContext
from TileLive.helpers.catalog import StreamCatalog
from TileLive.helpers.ext_utils import EncoderSpawnError

_pids = itertools.count(1000)


class FakeHandle:
    """Scripted encoder worker: the test decides what it prints and when it exits."""

    def __init__(self, stream_name: str, cmd: list[str]):
        self.stream_name = stream_name
        self.cmd = cmd
        self.pid = next(_pids)
        self.spawned_at = asyncio.get_running_loop().time()
        self.stopped = False
        self._lines: asyncio.Queue = asyncio.Queue()
        self._exit = asyncio.get_running_loop().create_future()

    @property
    def exited(self) -> bool:
        return self._exit.done()

    def emit(self, line: str):
        self._lines.put_nowait(line)

    def exit(self, code: int | None = 0):
        if not self._exit.done():
            self._exit.set_result(code)
            self._lines.put_nowait(None)

    async def lines(self):
        while True:
            line = await self._lines.get()
            if line is None:
                return
            yield line

    async def wait(self):
        return await asyncio.shield(self._exit)

    async def stop(self, timeout: float = 5):
        self.stopped = True
        self.exit(-15)


class FakeSpawner:
    def __init__(
        self,
        auto_exit: dict[str, int] | None = None,
        lifetime: dict[str, float] | None = None,
    ):
        self.spawned: list[FakeHandle] = []
        self.fail_for: set[str] = set()
        self.error_for: dict[str, Exception] = {}
        self.auto_exit = auto_exit or {}
        self.lifetime = lifetime or {}

    async def spawn(self, stream_name: str, cmd: list[str]) -> FakeHandle:
        if stream_name in self.fail_for:
            raise EncoderSpawnError(stream_name, FileNotFoundError("ffmpeg"))
        if stream_name in self.error_for:
            raise self.error_for[stream_name]

        handle = FakeHandle(stream_name, cmd)
        self.spawned.append(handle)

        if stream_name in self.auto_exit:
            handle.exit(self.auto_exit[stream_name])

        if stream_name in self.lifetime:
            asyncio.get_running_loop().call_later(
                self.lifetime[stream_name], handle.exit, 1
            )

        return handle

    def handles(self, stream_name: str) -> list[FakeHandle]:
        return [h for h in self.spawned if h.stream_name == stream_name]

    def current(self, stream_name: str) -> FakeHandle:
        return self.handles(stream_name)[-1]


async def wait_until(predicate, timeout: float = 2.0, step: float = 0.01):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(step)


@pytest.fixture
def hls_root(tmp_path):
    return str(tmp_path / "hls")


@pytest.fixture
def ctx(hls_root):
    return ServerContext(
        source_url="rtsp://camera.local:8554/live",
        n_streams=6,
        hls_root=hls_root,
        server_start=1_700_000_000_000,
        beacon_interval=0.05,
    )


@pytest.fixture
def catalog(ctx):
    return StreamCatalog(ctx)


@pytest.fixture
def spawner():
    return FakeSpawner()
