from time import time
from datetime import datetime
import logging
from logging import (
    FileHandler,
    StreamHandler,
    Formatter,
    getLogger,
    DEBUG,
    INFO,
    WARNING,
)
import pytz

from .version import get_version
from .config import Server, Encoder

START_TIME = time()

__title__ = "TileLive"
__version__ = get_version()
__author__ = "TileLive developers"
__license__ = "MIT"

DEBUG_MODE = Server.DEBUG_MODE
LOG_TZ = pytz.timezone(Server.LOG_TIMEZONE)


class TZFormatter(Formatter):
    def __init__(self, fmt=None, datefmt=None, tz=LOG_TZ):
        super().__init__(fmt, datefmt)
        self.tz = tz

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, self.tz)
        return dt.strftime(datefmt or "%Y-%m-%d %H:%M:%S")


LOG_FORMAT = (
    "[%(asctime)s] "
    "[%(levelname)s] "
    "[%(name)s] "
    "[%(filename)s:%(lineno)d] "
    "%(message)s"
)


def setup_logging(log_file: str | None = Server.LOG_FILE):
    root = logging.getLogger()

    if root.handlers:
        return

    root.setLevel(DEBUG if DEBUG_MODE else INFO)

    formatter = TZFormatter(LOG_FORMAT)

    stream_handler = StreamHandler()
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if log_file:
        file_handler = FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    noisy_loggers = {
        "asyncio": WARNING,
        "aiohttp.access": WARNING,
    }

    for name, level in noisy_loggers.items():
        getLogger(name).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = (
    "START_TIME",
    "__title__",
    "__version__",
    "__author__",
    "__license__",
    "setup_logging",
    "get_logger",
    "Server",
    "Encoder",
)
