import os
import shutil
from traceback import format_exc

from TileLive import get_logger

LOGGER = get_logger(__name__)

# =========================
# READABLE TIME FORMATTER
# =========================

def get_readable_time(seconds: int) -> str:
    """
    Converts seconds into a human-readable format.

    Examples:
        65     -> "1m: 5s"
        3725   -> "1h: 2m: 5s"
        90000  -> "1 days, 1h: 0m: 0s"
    """
    seconds = int(seconds)
    days, seconds = divmod(seconds, 86400)
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)

    parts = []
    if hours:
        parts.append(f"{hours}h")
    if hours or minutes:
        parts.append(f"{minutes}m")
    parts.append(f"{seconds}s")

    readable_time = ": ".join(parts)
    if days:
        readable_time = f"{days} days, {readable_time}"

    return readable_time


# =========================
# HLS FOLDERS
# =========================

def ensure_dir(path: str) -> str:
    """Creates the directory if absent. Safe to call repeatedly."""
    os.makedirs(path, exist_ok=True)
    return path


def clean_hls_folder(base_dir: str):
    """Deletes all files and folders inside the HLS directory."""
    if not os.path.exists(base_dir):
        return

    try:
        for name in os.listdir(base_dir):
            path = os.path.join(base_dir, name)
            try:
                if os.path.isfile(path) or os.path.islink(path):
                    os.unlink(path)
                elif os.path.isdir(path):
                    shutil.rmtree(path)
            except OSError:
                LOGGER.warning("Failed to remove %s", path)

        LOGGER.info("HLS folder cleaned: %s", base_dir)

    except OSError:
        LOGGER.error("Failed to clean HLS folder")
        LOGGER.error(format_exc())
