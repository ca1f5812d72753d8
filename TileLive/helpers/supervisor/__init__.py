from .policy import RestartPolicy, RESTART_MODES
from .supervisor import StreamSupervisor, StreamSlot, is_progress_line

__all__ = [
    "RestartPolicy",
    "RESTART_MODES",
    "StreamSupervisor",
    "StreamSlot",
    "is_progress_line",
]
