"""The live channel: tracked browser connections and broadcasts.

One ``LiveChannel`` exists per session, created once the server is
listening. Everything here runs on the event loop thread, so the
connection set and the pending queue are mutated without locks.

Broadcasts are fire-and-forget: frames are queued synchronously to every
OPEN connection and flushed by that connection's writer task, so frames
for one connection keep their order. Connections that are not OPEN are
skipped and reported as undelivered, never buffered.
"""

import asyncio
import itertools
import logging

from burrow.live.messages import BroadcastResult, LiveMessage, ReadyState, SendResult

logger = logging.getLogger("burrow.live")


class Connection:
    """A browser peer of the live channel.

    Outbound frames wait in ``_outbox`` until the writer task sends them;
    ``None`` in the outbox tells the writer to close the socket.
    """

    __slots__ = ("_closed", "_outbox", "client", "id", "state")

    def __init__(self, connection_id: int, client: tuple[str, int] | None = None) -> None:
        self.id = connection_id
        self.client = client
        self.state = ReadyState.CONNECTING
        self._outbox: asyncio.Queue[str | None] = asyncio.Queue()
        self._closed = asyncio.Event()

    def __repr__(self) -> str:
        return f"Connection({self.id}, {self.client!r}, {self.state.name})"

    def send(self, frame: str) -> SendResult:
        """Queue *frame* when OPEN; otherwise report it undelivered."""
        if self.state is not ReadyState.OPEN:
            return SendResult(self.id, delivered=False, state=self.state)
        self._outbox.put_nowait(frame)
        return SendResult(self.id, delivered=True, state=self.state)

    async def next_frame(self) -> str | None:
        return await self._outbox.get()

    def close(self) -> None:
        """Ask the writer task to send a close frame."""
        if self.state in (ReadyState.CONNECTING, ReadyState.OPEN):
            self.state = ReadyState.CLOSING
            self._outbox.put_nowait(None)

    def mark_closed(self) -> None:
        self.state = ReadyState.CLOSED
        self._closed.set()

    async def wait_closed(self) -> None:
        await self._closed.wait()


class LiveChannel:
    """Broadcast hub for the session's browser connections.

    *pending* is the session's pending-message list. It is shared, not
    copied: messages added through ``eval_always`` after the channel was
    created are replayed to later connections too.
    """

    __slots__ = ("_closed", "_connections", "_ids", "_pending")

    def __init__(self, pending: list[LiveMessage]) -> None:
        self._pending = pending
        self._connections: dict[int, Connection] = {}
        self._ids = itertools.count(1)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def connection_count(self) -> int:
        """Number of OPEN connections (zero means nobody is listening)."""
        return sum(1 for conn in self._connections.values() if conn.state is ReadyState.OPEN)

    @property
    def connections(self) -> tuple[Connection, ...]:
        return tuple(self._connections.values())

    # -- Broadcasting --

    def eval(self, code: str) -> BroadcastResult:
        """Run *code* in every connected browser."""
        return self.broadcast(LiveMessage("eval", code))

    def livereload(self, url: str) -> BroadcastResult:
        """Tell every connected browser that *url* changed."""
        return self.broadcast(LiveMessage("livereload", url))

    def broadcast(self, message: LiveMessage) -> BroadcastResult:
        frame = message.encode()
        results = tuple(conn.send(frame) for conn in list(self._connections.values()))
        result = BroadcastResult(message, results)
        logger.debug(
            "Broadcast %s to %d connection(s), %d skipped",
            message.type,
            result.delivered,
            result.skipped,
        )
        return result

    # -- Connection tracking --

    def open(self, client: tuple[str, int] | None = None) -> Connection:
        """Track a newly accepted connection and replay the pending queue to it."""
        conn = Connection(next(self._ids), client)
        self._connections[conn.id] = conn
        conn.state = ReadyState.OPEN
        for message in self._pending:
            conn.send(message.encode())
        logger.info(
            "Live connection %d opened from %s (%d pending replayed)",
            conn.id,
            _format_client(client),
            len(self._pending),
        )
        return conn

    def discard(self, conn: Connection) -> None:
        """Forget *conn* once its socket is gone."""
        self._connections.pop(conn.id, None)
        conn.mark_closed()
        logger.info("Live connection %d closed", conn.id)

    async def close(self, timeout: float = 1.0) -> None:
        """Close every connection and empty the set.

        Waits up to *timeout* seconds for the close frames to go out.
        """
        self._closed = True
        conns = list(self._connections.values())
        self._connections.clear()
        for conn in conns:
            conn.close()
        if not conns:
            return
        try:
            async with asyncio.timeout(timeout):
                await asyncio.gather(*(conn.wait_closed() for conn in conns))
        except TimeoutError:
            logger.warning("Timed out closing %d live connection(s)", len(conns))


def _format_client(client: tuple[str, int] | None) -> str:
    if client is None:
        return "unknown"
    return f"{client[0]}:{client[1]}"
