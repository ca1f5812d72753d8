from .registry import FFMPEG_PROCS
from .args import build_ffmpeg_args
from .process import FFmpegProcess
from .spawner import EncoderHandle, ProcessSpawner, FFmpegSpawner
from .stop_all import stop_all_ffmpeg

__all__ = [
    "FFMPEG_PROCS",
    "build_ffmpeg_args",
    "FFmpegProcess",
    "EncoderHandle",
    "ProcessSpawner",
    "FFmpegSpawner",
    "stop_all_ffmpeg",
]
