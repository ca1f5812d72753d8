from .catalog import StreamCatalog, HLS_URL_PREFIX

__all__ = [
    "StreamCatalog",
    "HLS_URL_PREFIX",
]
