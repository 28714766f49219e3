"""Live channel protocol over ASGI websockets.

Accepts a browser connection, registers it with the channel (which
replays the pending queue), then runs two tasks until either ends:

- **Writer**: drains the connection's outbox into ``websocket.send``
  frames and sends the close frame when asked to.
- **Reader**: logs inbound frames and waits for ``websocket.disconnect``.
"""

import asyncio
import contextlib
import logging

from burrow._internal.asgi import Receive, Scope, Send, scope_client
from burrow.live.channel import Connection, LiveChannel

logger = logging.getLogger("burrow.live")

# Policy violation: wrong path or no channel yet
REJECT_CODE = 1008
# Normal closure on shutdown
GOING_AWAY_CODE = 1001


async def handle_websocket(
    channel: LiveChannel | None,
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    live_path: str,
) -> None:
    """Serve one websocket scope against *channel*.

    Connections to any path other than *live_path*, or arriving while
    there is no open channel, are closed before they are accepted.
    """
    message = await receive()
    if message["type"] != "websocket.connect":
        return

    if channel is None or channel.closed or scope["path"] != live_path:
        logger.debug("Rejecting websocket connection to %s", scope["path"])
        await send({"type": "websocket.close", "code": REJECT_CODE})
        return

    await send({"type": "websocket.accept"})
    conn = channel.open(scope_client(scope))

    writer_task = asyncio.create_task(_write_frames(conn, send))
    reader_task = asyncio.create_task(_read_frames(conn, receive))
    try:
        await asyncio.wait(
            {writer_task, reader_task},
            return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        channel.discard(conn)
        # Also reached when the endpoint itself is cancelled
        for task in (writer_task, reader_task):
            if not task.done():
                task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task


async def _write_frames(conn: Connection, send: Send) -> None:
    while True:
        frame = await conn.next_frame()
        try:
            if frame is None:
                await send({"type": "websocket.close", "code": GOING_AWAY_CODE})
                return
            await send({"type": "websocket.send", "text": frame})
        except (OSError, RuntimeError) as exc:
            # Peer went away between the broadcast and the write
            logger.debug("Live connection %d write failed: %s", conn.id, exc)
            return


async def _read_frames(conn: Connection, receive: Receive) -> None:
    while True:
        message = await receive()
        kind = message["type"]
        if kind == "websocket.disconnect":
            return
        if kind == "websocket.receive":
            text = message.get("text")
            if text is None:
                data = message.get("bytes") or b""
                text = data.decode("utf-8", errors="replace")
            logger.info("Live connection %d says: %s", conn.id, text)
