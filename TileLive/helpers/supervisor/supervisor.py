import asyncio
import time
from dataclasses import dataclass
from typing import Dict

from TileLive import get_logger
from TileLive.context import ServerContext
from TileLive.helpers.catalog import StreamCatalog
from TileLive.helpers.ext_utils import EncoderSpawnError, ensure_dir
from TileLive.helpers.ffmpeg import (
    EncoderHandle,
    ProcessSpawner,
    FFmpegSpawner,
    build_ffmpeg_args,
)
from .policy import RestartPolicy

LOGGER = get_logger(__name__)

# seconds to wait for the last log lines after the worker has exited
DRAIN_TIMEOUT = 1.0


def is_progress_line(line: str) -> bool:
    return "frame=" in line


@dataclass
class StreamSlot:
    id: int
    name: str
    output_dir: str
    handle: EncoderHandle | None = None
    restart_count: int = 0
    started_at: float | None = None
    last_exit_code: int | None = None
    gave_up: bool = False

    @property
    def running(self) -> bool:
        return self.handle is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "running": self.running,
            "pid": self.handle.pid if self.handle else None,
            "restartCount": self.restart_count,
            "startedAt": self.started_at,
            "lastExitCode": self.last_exit_code,
            "gaveUp": self.gave_up,
        }


class StreamSupervisor:
    """
    Keeps one encoder worker alive per slot.

    Each slot runs in its own task and is the only code that spawns for
    that slot, so an exit leads to exactly one relaunch and a slow or
    crashing worker never holds up the other slots.
    """

    def __init__(
        self,
        ctx: ServerContext,
        catalog: StreamCatalog,
        spawner: ProcessSpawner | None = None,
        policy: RestartPolicy | None = None,
    ):
        self.ctx = ctx
        self.catalog = catalog
        self.spawner = spawner or FFmpegSpawner()
        self.policy = policy or RestartPolicy()

        self.slots: Dict[int, StreamSlot] = {
            slot_id: StreamSlot(
                id=slot_id,
                name=catalog.stream_name(slot_id),
                output_dir=catalog.output_dir(slot_id),
            )
            for slot_id in ctx.slot_ids
        }
        self._tasks: Dict[int, asyncio.Task] = {}

    # --------------------------------------------------
    # LIFECYCLE
    # --------------------------------------------------
    async def start(self):
        if self._tasks:
            return

        for slot in self.slots.values():
            self._tasks[slot.id] = asyncio.create_task(
                self._run_slot(slot),
                name=f"supervisor-{slot.name}",
            )

        LOGGER.info(
            "[SUPERVISOR] started %d slots | source=%s | policy=%s",
            len(self.slots),
            self.ctx.source_url,
            self.policy.mode,
        )

    async def stop(self):
        tasks = list(self._tasks.values())
        self._tasks.clear()

        for task in tasks:
            task.cancel()

        await asyncio.gather(*tasks, return_exceptions=True)
        LOGGER.info("[SUPERVISOR] all slots stopped")

    def snapshot(self) -> list[dict]:
        return [slot.to_dict() for slot in self.slots.values()]

    # --------------------------------------------------
    # PER SLOT
    # --------------------------------------------------
    async def _run_slot(self, slot: StreamSlot):
        failures = 0

        while True:
            started = time.monotonic()
            try:
                await self._run_once(slot)
            except asyncio.CancelledError:
                raise
            except Exception:
                slot.handle = None
                LOGGER.exception("[%s] worker run failed", slot.name)
            ran_for = time.monotonic() - started

            if ran_for >= self.policy.reset_after:
                failures = 0
            failures += 1

            delay = self.policy.next_delay(failures)
            if delay is None:
                slot.gave_up = True
                LOGGER.error(
                    "[%s] giving up after %d failed runs",
                    slot.name,
                    failures,
                )
                return

            LOGGER.info("[%s] restarting in %.1fs", slot.name, delay)
            await asyncio.sleep(delay)
            slot.restart_count += 1

    async def _run_once(self, slot: StreamSlot) -> int | None:
        try:
            ensure_dir(slot.output_dir)
        except OSError as e:
            LOGGER.error("[%s] cannot create %s: %s", slot.name, slot.output_dir, e)
            return None

        cmd = build_ffmpeg_args(self.ctx.source_url, slot.output_dir)
        LOGGER.info("[%s] spawning: %s", slot.name, " ".join(cmd))

        try:
            handle = await self.spawner.spawn(slot.name, cmd)
        except EncoderSpawnError as e:
            LOGGER.error("%s", e)
            slot.last_exit_code = None
            return None

        slot.handle = handle
        slot.started_at = time.time()
        drain = asyncio.create_task(self._drain_output(slot, handle))

        try:
            code = await handle.wait()
        except BaseException:
            drain.cancel()
            await handle.stop()
            slot.handle = None
            raise

        slot.handle = None
        slot.last_exit_code = code

        try:
            await asyncio.wait_for(drain, timeout=DRAIN_TIMEOUT)
        except asyncio.TimeoutError:
            LOGGER.debug("[%s] output still open after exit", slot.name)

        LOGGER.warning("[%s] ffmpeg exited with %s", slot.name, code)
        return code

    async def _drain_output(self, slot: StreamSlot, handle: EncoderHandle):
        try:
            async for line in handle.lines():
                if is_progress_line(line):
                    continue
                LOGGER.info("[%s] %s", slot.name, line)
        except Exception:
            LOGGER.exception("[%s] output drain error", slot.name)
