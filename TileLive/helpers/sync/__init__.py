from .events import SERVER_INFO, CLOCK, SYNC_UPDATE, encode_event, decode_event
from .hub import SyncHub, ViewerSession

__all__ = [
    "SERVER_INFO",
    "CLOCK",
    "SYNC_UPDATE",
    "encode_event",
    "decode_event",
    "SyncHub",
    "ViewerSession",
]
