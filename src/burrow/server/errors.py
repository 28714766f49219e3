"""Error handling for pipeline requests.

Maps HTTPError exceptions and unexpected failures to plain Responses.
In debug mode the detail (or the traceback) goes into the body.
"""

import logging
import traceback

from burrow.errors import HTTPError
from burrow.http.request import Request
from burrow.http.response import Response

logger = logging.getLogger("burrow.server")

TEXT = "text/plain; charset=utf-8"

REASONS = {
    400: "Bad Request",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    413: "Payload Too Large",
    500: "Internal Server Error",
}


def handle_http_error(exc: HTTPError, request: Request, *, debug: bool) -> Response:
    """Map an HTTPError to a Response with the same status."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    detail = REASONS.get(exc.status, f"Error {exc.status}")
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"

    resp = Response(body=detail, status=exc.status, content_type=TEXT)
    return resp.with_headers(dict(exc.headers))


def handle_internal_error(exc: Exception, request: Request, *, debug: bool) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)

    if debug:
        body = "".join(traceback.format_exception(exc))
        return Response(body=body, status=500, content_type=TEXT)

    return Response(body="Internal Server Error", status=500, content_type=TEXT)
