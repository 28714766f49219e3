"""ASGI request handler: runs one HTTP request through the pipeline.

The only HTTP component that touches raw ASGI directly. Builds the
Request and the pipeline Context, runs the composed stages, maps
errors, and sends the Response back through ASGI send().
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from burrow._internal.asgi import Receive, Scope, Send
from burrow.errors import HTTPError, NotFound
from burrow.http.request import Request
from burrow.pipeline.context import Context
from burrow.pipeline.protocol import Handler
from burrow.server.errors import handle_http_error, handle_internal_error
from burrow.server.sender import send_response

if TYPE_CHECKING:
    from burrow.app import DevServer

logger = logging.getLogger("burrow.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    server: DevServer,
    handler: Handler,
    debug: bool,
) -> None:
    """Process a single HTTP request through the prepared pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    ctx = Context(request=request, server=server)

    try:
        await handler(ctx)
        if not ctx.finalized:
            raise NotFound(f"Nothing in the pipeline answered {request.path}")
        response = ctx.to_response()
    except HTTPError as exc:
        response = handle_http_error(exc, request, debug=debug)
    except Exception as exc:
        response = handle_internal_error(exc, request, debug=debug)

    logger.debug("%s %s -> %d", request.method, request.path, response.status)
    await send_response(response, send, head=request.method == "HEAD")
