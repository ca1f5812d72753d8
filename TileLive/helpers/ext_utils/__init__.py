from .exception import TileLiveError, ConfigError, EncoderSpawnError, InvalidEvent
from .utils import get_readable_time, ensure_dir, clean_hls_folder

__all__ = [
    "TileLiveError",
    "ConfigError",
    "EncoderSpawnError",
    "InvalidEvent",
    "get_readable_time",
    "ensure_dir",
    "clean_hls_folder",
]
