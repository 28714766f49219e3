"""Live channel: push ``eval`` and ``livereload`` messages to browsers."""

from burrow.live.channel import Connection, LiveChannel
from burrow.live.handler import handle_websocket
from burrow.live.messages import BroadcastResult, LiveMessage, ReadyState, SendResult

__all__ = [
    "BroadcastResult",
    "Connection",
    "LiveChannel",
    "LiveMessage",
    "ReadyState",
    "SendResult",
    "handle_websocket",
]
