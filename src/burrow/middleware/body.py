"""Request body parsing stage.

Reads the body once for methods that carry one and stores the decoded
value on ``ctx.request_body``:

- JSON (``application/json``, ``*+json``) → Python value
- ``application/x-www-form-urlencoded`` / ``multipart/form-data`` → ``FormData``
- ``text/*`` → ``str``
- anything else → ``bytes``

Left out of the pipeline when the session runs behind a proxy, so the
body stream stays untouched for forwarding.
"""

import json

from burrow.errors import HTTPError
from burrow.http.forms import parse_form_data
from burrow.pipeline.context import Context
from burrow.pipeline.protocol import Next

_BODYLESS_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def _media_type(content_type: str | None) -> str:
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


class BodyParser:
    """Stage that decodes the request body by content type."""

    __slots__ = ("_max_body_size",)

    def __init__(self, max_body_size: int) -> None:
        self._max_body_size = max_body_size

    async def __call__(self, ctx: Context, next: Next) -> None:
        if ctx.method not in _BODYLESS_METHODS:
            ctx.request_body = await self._parse(ctx)
        await next()

    async def _parse(self, ctx: Context) -> object:
        request = ctx.request
        declared = request.content_length
        if declared is not None and declared > self._max_body_size:
            raise HTTPError(413, "Request body too large")

        raw = await request.body()
        if len(raw) > self._max_body_size:
            raise HTTPError(413, "Request body too large")
        if not raw:
            return None

        media_type = _media_type(request.content_type)
        if media_type == "application/json" or media_type.endswith("+json"):
            try:
                return json.loads(raw)
            except (UnicodeDecodeError, json.JSONDecodeError) as exc:
                raise HTTPError(400, f"Malformed JSON body: {exc}") from exc
        if media_type in _FORM_TYPES:
            try:
                return parse_form_data(raw, request.content_type or media_type)
            except ValueError as exc:
                raise HTTPError(400, f"Malformed form body: {exc}") from exc
        if media_type.startswith("text/"):
            return raw.decode("utf-8", errors="replace")
        return raw
