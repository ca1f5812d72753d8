import time
from dataclasses import dataclass, field
from typing import Callable

from TileLive.config import Server
from TileLive.helpers.ext_utils import ConfigError


def epoch_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class ServerContext:
    """
    Process-wide values fixed at boot.

    Every component receives the same instance at construction time.
    `server_start` is the reference start time shared with all viewers;
    `clock` returns the current server time in epoch milliseconds and can
    be replaced in tests.
    """

    source_url: str
    n_streams: int
    hls_root: str
    server_start: int = field(default_factory=epoch_ms)
    clock: Callable[[], int] = epoch_ms
    beacon_interval: float = 1.0

    def __post_init__(self):
        if self.n_streams < 1:
            raise ConfigError(f"N_STREAMS must be at least 1, got {self.n_streams}")
        if self.beacon_interval <= 0:
            raise ConfigError("BEACON_INTERVAL must be positive")

    @property
    def slot_ids(self) -> range:
        return range(1, self.n_streams + 1)

    def now(self) -> int:
        return self.clock()

    @classmethod
    def from_config(cls) -> "ServerContext":
        return cls(
            source_url=Server.RTSP_URL,
            n_streams=Server.N_STREAMS,
            hls_root=Server.HLS_ROOT,
            beacon_interval=Server.BEACON_INTERVAL,
        )
