"""Live channel message and result types.

Frozen dataclasses for the frames pushed to browsers and for what a
broadcast did with them.
"""

import json
from dataclasses import dataclass
from enum import IntEnum
from typing import Literal

type MessageType = Literal["eval", "livereload"]


class ReadyState(IntEnum):
    """Connection state, numbered like the browser's ``WebSocket.readyState``."""

    CONNECTING = 0
    OPEN = 1
    CLOSING = 2
    CLOSED = 3


@dataclass(frozen=True, slots=True)
class LiveMessage:
    """A message for the browser client.

    ``eval`` payloads are JavaScript source; ``livereload`` payloads are
    the URL that changed.
    """

    type: MessageType
    payload: str

    def encode(self) -> str:
        """Serialize to the JSON text frame the client expects."""
        return json.dumps({"type": self.type, "payload": self.payload})


@dataclass(frozen=True, slots=True)
class SendResult:
    """Outcome of handing one frame to one connection."""

    connection_id: int
    delivered: bool
    state: ReadyState


@dataclass(frozen=True, slots=True)
class BroadcastResult:
    """Per-connection outcomes of one broadcast, in connection order."""

    message: LiveMessage
    results: tuple[SendResult, ...] = ()

    @property
    def delivered(self) -> int:
        return sum(1 for result in self.results if result.delivered)

    @property
    def skipped(self) -> int:
        return sum(1 for result in self.results if not result.delivered)
