import os

from TileLive.config import Encoder
from TileLive.context import ServerContext

HLS_URL_PREFIX = "/hls"


class StreamCatalog:
    """
    Where each slot publishes its output, and what the viewers can fetch.

    The listing is derived from the slot count alone, so a slot whose
    encoder is restarting is still listed: the files from its previous
    run stay servable until the new run overwrites them.
    """

    def __init__(self, ctx: ServerContext):
        self.ctx = ctx

    @staticmethod
    def stream_name(slot_id: int) -> str:
        return f"stream{slot_id}"

    def url_for(self, slot_id: int) -> str:
        return f"{HLS_URL_PREFIX}/{self.stream_name(slot_id)}/{Encoder.MANIFEST_NAME}"

    def output_dir(self, slot_id: int) -> str:
        return os.path.join(self.ctx.hls_root, self.stream_name(slot_id))

    def list_streams(self) -> dict:
        streams = [
            {"id": slot_id, "url": self.url_for(slot_id)}
            for slot_id in self.ctx.slot_ids
        ]
        return {"streams": streams, "serverStart": self.ctx.server_start}
