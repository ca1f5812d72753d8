import os

from TileLive.config import Server, Encoder


def build_ffmpeg_args(
    source_url: str,
    output_dir: str,
    params=Encoder,
    ffmpeg_path: str = Server.FFMPEG_PATH,
) -> list[str]:
    """
    Full command line for one slot: pull the shared source, re-encode it
    with the fixed parameter set and write a rolling HLS window into
    `output_dir`.
    """
    gop = str(params.KEYFRAME_INTERVAL)

    return [
        ffmpeg_path,

        # INPUT
        "-rtsp_transport", params.RTSP_TRANSPORT,
        "-i", source_url,

        # no audio
        "-an",

        # Video
        "-c:v", params.VIDEO_CODEC,
        "-preset", params.PRESET,
        "-tune", params.TUNE,
        "-r", str(params.FRAME_RATE),
        "-g", gop,
        "-keyint_min", gop,
        "-sc_threshold", "0",
        "-b:v", params.BITRATE,
        "-maxrate", params.MAXRATE,
        "-bufsize", params.BUFSIZE,
        "-vf", f"scale={params.SCALE}",

        # HLS
        "-f", "hls",
        "-hls_time", str(params.SEGMENT_TIME),
        "-hls_list_size", str(params.LIST_SIZE),
        "-hls_flags", params.HLS_FLAGS,
        "-hls_segment_filename", os.path.join(output_dir, params.SEGMENT_PATTERN),

        os.path.join(output_dir, params.MANIFEST_NAME),
    ]
