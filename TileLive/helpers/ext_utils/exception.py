class TileLiveError(Exception):
    pass


class ConfigError(TileLiveError):
    pass


class EncoderSpawnError(TileLiveError):
    def __init__(self, stream_name: str, cause: BaseException):
        super().__init__(f"[{stream_name}] failed to start encoder: {cause}")
        self.stream_name = stream_name
        self.cause = cause


class InvalidEvent(TileLiveError):
    pass
