"""Per-request pipeline context.

One ``Context`` is created for every HTTP request and handed to each
stage in turn. Stages read the request, record what the dispatchers
decided, and build up the response in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from burrow.http.response import Response

if TYPE_CHECKING:
    from burrow.app import DevServer
    from burrow.dispatch.dispatcher import Dispatcher
    from burrow.http.request import Request

HTML = "text/html; charset=utf-8"


@dataclass(slots=True)
class Context:
    """Mutable request/response state shared by every pipeline stage.

    ``finalized`` is set by whichever stage produced the response
    (static mounts, interceptors, or user middleware via ``respond()``).
    Interceptors leave finalized responses alone; the script injectors
    only look at ``content_type``.
    """

    request: Request
    server: DevServer
    status: int = 404
    body: str | bytes | None = None
    content_type: str = ""
    headers: list[tuple[str, str]] = field(default_factory=list)
    dispatcher: Dispatcher | None = None
    finalized: bool = False
    request_body: Any = None
    state: dict[str, Any] = field(default_factory=dict)

    @property
    def path(self) -> str:
        return self.request.path

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def params(self) -> dict[str, str]:
        """Path parameters captured by the router dispatcher."""
        if self.dispatcher is None:
            return {}
        return self.dispatcher.params

    @property
    def text(self) -> str:
        """The current body as text (empty when unset)."""
        if self.body is None:
            return ""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8", errors="replace")
        return self.body

    def respond(
        self,
        body: str | bytes,
        *,
        content_type: str = HTML,
        status: int = 200,
    ) -> None:
        """Set the response and mark it final for the interceptors."""
        self.body = body
        self.content_type = content_type
        self.status = status
        self.finalized = True

    def set_header(self, name: str, value: str) -> None:
        """Set a response header, replacing earlier values of the same name."""
        lowered = name.lower()
        self.headers = [(k, v) for k, v in self.headers if k.lower() != lowered]
        self.headers.append((name, value))

    def to_response(self) -> Response:
        """Freeze the current state into a ``Response``."""
        return Response(
            body=self.body if self.body is not None else "",
            status=self.status,
            content_type=self.content_type or HTML,
            headers=tuple(self.headers),
        )
