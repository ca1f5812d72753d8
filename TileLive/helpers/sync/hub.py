import asyncio
import uuid
from typing import Awaitable, Callable, Dict

from TileLive import get_logger
from TileLive.context import ServerContext
from .events import SERVER_INFO, CLOCK, SYNC_UPDATE, decode_event

LOGGER = get_logger(__name__)

Send = Callable[[str, dict], Awaitable[None]]
Close = Callable[[], Awaitable[None]]


class ViewerSession:
    def __init__(self, session_id: str, send: Send, close: Close | None = None):
        self.id = session_id
        self._send = send
        self._close = close
        self._lock = asyncio.Lock()
        self.beacon_task: asyncio.Task | None = None

    async def emit(self, event: str, data: dict) -> bool:
        # beacons and relayed events share one connection
        async with self._lock:
            try:
                await self._send(event, data)
                return True
            except ConnectionError as e:
                LOGGER.debug("[%s] send %s failed: %s", self.id, event, e)
                return False

    async def close(self):
        if self._close:
            await self._close()


class SyncHub:
    """
    Keeps every connected viewer on the same clock.

    - on connect: one server-info event with the reference start time
    - while connected: a clock beacon every beacon interval
    - sync-update from one viewer is relayed as-is to all the others

    Play state is relayed, never stored or arbitrated: the last event a
    viewer receives wins.
    """

    def __init__(self, ctx: ServerContext):
        self.ctx = ctx
        self.sessions: Dict[str, ViewerSession] = {}

    @property
    def session_count(self) -> int:
        return len(self.sessions)

    # --------------------------------------------------
    # SESSIONS
    # --------------------------------------------------
    async def connect(
        self,
        send: Send,
        close: Close | None = None,
        session_id: str | None = None,
    ) -> ViewerSession:
        session = ViewerSession(session_id or uuid.uuid4().hex, send, close)
        self.sessions[session.id] = session

        await session.emit(SERVER_INFO, {"serverStart": self.ctx.server_start})
        session.beacon_task = asyncio.create_task(
            self._beacon(session),
            name=f"beacon-{session.id}",
        )

        LOGGER.info("client connected %s (%d online)", session.id, self.session_count)
        return session

    async def disconnect(self, session_id: str):
        session = self.sessions.pop(session_id, None)
        if session is None:
            return

        if session.beacon_task:
            session.beacon_task.cancel()
            try:
                await session.beacon_task
            except asyncio.CancelledError:
                pass

        LOGGER.info("client disconnected %s (%d online)", session_id, self.session_count)

    async def close_all(self):
        for session in list(self.sessions.values()):
            await self.disconnect(session.id)
            await session.close()

    async def _beacon(self, session: ViewerSession):
        loop = asyncio.get_running_loop()
        interval = self.ctx.beacon_interval
        next_tick = loop.time() + interval

        while True:
            await asyncio.sleep(max(0.0, next_tick - loop.time()))
            await session.emit(CLOCK, {"now": self.ctx.now()})
            next_tick = max(next_tick + interval, loop.time())

    # --------------------------------------------------
    # MESSAGES
    # --------------------------------------------------
    async def relay(self, sender_id: str, event: str, data: dict) -> int:
        targets = [
            session for sid, session in self.sessions.items()
            if sid != sender_id
        ]
        results = await asyncio.gather(
            *(session.emit(event, data) for session in targets)
        )
        return sum(results)

    async def handle_message(self, session_id: str, text: str) -> int:
        """
        Handles one frame from a viewer. Returns how many viewers it reached.

        Raises InvalidEvent for malformed frames.
        """
        event, data = decode_event(text)

        if event != SYNC_UPDATE:
            LOGGER.debug("[%s] ignoring event %s", session_id, event)
            return 0

        delivered = await self.relay(session_id, event, data)
        LOGGER.debug(
            "[%s] sync-update relayed to %d viewers | %s",
            session_id,
            delivered,
            data,
        )
        return delivered
