"""Typed ASGI definitions.

Raw ASGI aliases used by the request handler, the live channel endpoint,
and the test client. Users never see these.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any, TypeAlias

# Raw ASGI 3 types
Scope: TypeAlias = MutableMapping[str, Any]
Message: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[Message]]
Send: TypeAlias = Callable[[Message], Awaitable[None]]
ASGIApp: TypeAlias = Callable[[Scope, Receive, Send], Awaitable[None]]


def scope_client(scope: Scope) -> tuple[str, int] | None:
    """Return the ``(host, port)`` client pair from a scope, if the server sent one."""
    client = scope.get("client")
    return (client[0], client[1]) if client else None
