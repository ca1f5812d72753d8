import json

from TileLive.helpers.ext_utils import InvalidEvent

SERVER_INFO = "server-info"
CLOCK = "clock"
SYNC_UPDATE = "sync-update"


def encode_event(event: str, data: dict) -> str:
    return json.dumps({"event": event, "data": data}, separators=(",", ":"))


def decode_event(text: str) -> tuple[str, dict]:
    """
    Parses one client frame: {"event": <name>, "data": <object>}.

    Raises InvalidEvent when the frame is not of that shape. The payload
    itself is not inspected.
    """
    try:
        frame = json.loads(text)
    except (TypeError, ValueError) as e:
        raise InvalidEvent(f"frame is not JSON: {e}") from e

    if not isinstance(frame, dict):
        raise InvalidEvent("frame must be a JSON object")

    event = frame.get("event")
    if not isinstance(event, str) or not event:
        raise InvalidEvent("frame has no event name")

    data = frame.get("data", {})
    if not isinstance(data, dict):
        raise InvalidEvent(f"{event}: data must be a JSON object")

    return event, data
