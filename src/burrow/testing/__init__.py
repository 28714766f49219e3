"""Test utilities for burrow sessions.

Provides an in-process test client covering HTTP requests, the ASGI
lifespan, and live-channel websockets::

    from burrow.testing import TestClient
"""

from burrow.testing.client import TestClient, WebSocketClosed, WebSocketRejected, WebSocketSession

__all__ = [
    "TestClient",
    "WebSocketClosed",
    "WebSocketRejected",
    "WebSocketSession",
]
