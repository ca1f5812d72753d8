from os import getenv, path
from dotenv import load_dotenv

load_dotenv(path.join(path.dirname(path.dirname(__file__)), "config.env"))


def _bool(name: str, default: str = "False") -> bool:
    return getenv(name, default).strip().lower() in ("1", "true", "yes")


class Server:
    RTSP_URL = getenv("RTSP_URL", "rtsp://127.0.0.1:8554/live")

    BIND_HOST = getenv("BIND_HOST", "0.0.0.0")
    PORT = int(getenv("PORT", "8000"))
    CORS_ORIGIN = getenv("CORS_ORIGIN", "*")

    N_STREAMS = int(getenv("N_STREAMS", "6"))
    HLS_ROOT = path.abspath(getenv("HLS_ROOT", path.join("public", "hls")))
    CLEAN_HLS_ON_START = _bool("CLEAN_HLS_ON_START")

    # Windows needs the full path, e.g. C:\\ffmpeg\\bin\\ffmpeg.exe
    FFMPEG_PATH = getenv("FFMPEG_PATH", "ffmpeg")

    RESTART_POLICY = getenv("RESTART_POLICY", "fixed").strip().lower()
    RESTART_DELAY = float(getenv("RESTART_DELAY", "2.0"))
    RESTART_MAX_DELAY = float(getenv("RESTART_MAX_DELAY", "60.0"))
    RESTART_MAX_ATTEMPTS = int(getenv("RESTART_MAX_ATTEMPTS", "0"))
    RESTART_RESET_AFTER = float(getenv("RESTART_RESET_AFTER", "30.0"))

    BEACON_INTERVAL = float(getenv("BEACON_INTERVAL", "1.0"))

    LOG_FILE = getenv("LOG_FILE", "log.txt")
    LOG_TIMEZONE = getenv("LOG_TIMEZONE", "UTC")
    DEBUG_MODE = _bool("DEBUG_MODE")


class Encoder:
    RTSP_TRANSPORT = getenv("ENCODER_RTSP_TRANSPORT", "tcp")

    VIDEO_CODEC = getenv("ENCODER_VIDEO_CODEC", "libx264")
    PRESET = getenv("ENCODER_PRESET", "veryfast")
    TUNE = getenv("ENCODER_TUNE", "zerolatency")
    FRAME_RATE = int(getenv("ENCODER_FRAME_RATE", "25"))
    KEYFRAME_INTERVAL = int(getenv("ENCODER_KEYFRAME_INTERVAL", "50"))

    BITRATE = getenv("ENCODER_BITRATE", "1000k")
    MAXRATE = getenv("ENCODER_MAXRATE", "1200k")
    BUFSIZE = getenv("ENCODER_BUFSIZE", "2000k")

    # width 640, height follows the aspect ratio
    SCALE = getenv("ENCODER_SCALE", "640:-2")

    SEGMENT_TIME = int(getenv("ENCODER_SEGMENT_TIME", "1"))
    LIST_SIZE = int(getenv("ENCODER_LIST_SIZE", "6"))
    HLS_FLAGS = getenv("ENCODER_HLS_FLAGS", "delete_segments+program_date_time")

    SEGMENT_PATTERN = "seg_%03d.ts"
    MANIFEST_NAME = "index.m3u8"
