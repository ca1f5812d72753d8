from dataclasses import dataclass

from TileLive.config import Server
from TileLive.helpers.ext_utils import ConfigError

RESTART_MODES = ("fixed", "exponential")
MAX_EXPONENT = 32


@dataclass(frozen=True)
class RestartPolicy:
    """
    How long a slot waits before relaunching its encoder.

    `attempt` counts consecutive short runs, starting at 1. A run that
    lasted at least `reset_after` seconds resets the count. With
    `max_attempts` at 0 the slot never gives up.
    """

    mode: str = "fixed"
    delay: float = 2.0
    max_delay: float = 60.0
    max_attempts: int = 0
    reset_after: float = 30.0

    def __post_init__(self):
        if self.mode not in RESTART_MODES:
            raise ConfigError(
                f"unknown restart policy {self.mode!r}, expected one of {RESTART_MODES}"
            )
        if self.delay < 0 or self.max_delay < 0:
            raise ConfigError("restart delays must not be negative")
        if self.max_attempts < 0:
            raise ConfigError("RESTART_MAX_ATTEMPTS must not be negative")

    def next_delay(self, attempt: int) -> float | None:
        if self.max_attempts and attempt > self.max_attempts:
            return None

        if self.mode == "exponential":
            # capped exponent keeps the float in range
            return min(self.delay * 2 ** min(attempt - 1, MAX_EXPONENT), self.max_delay)

        return self.delay

    @classmethod
    def from_config(cls) -> "RestartPolicy":
        return cls(
            mode=Server.RESTART_POLICY,
            delay=Server.RESTART_DELAY,
            max_delay=Server.RESTART_MAX_DELAY,
            max_attempts=Server.RESTART_MAX_ATTEMPTS,
            reset_after=Server.RESTART_RESET_AFTER,
        )
