"""HTML script injection stages.

Appends ``<script>`` tags to every ``text/html`` response. The builtin
stage adds the live-channel client (event bus, connector, eval
executor); the dynamic stage adds whatever the session registered
through ``DevServer.inject_script``, filtered per request by each
script's condition.

No HTML parsing happens: tags go at the end of the body text.
"""

from __future__ import annotations

import html
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import urlencode

from burrow.pipeline.context import Context
from burrow.pipeline.protocol import Next

if TYPE_CHECKING:
    from burrow.http.request import Request

_HTML_CONTENT = re.compile(r"text/html", re.IGNORECASE)

BUILTIN_SCRIPTS = (
    "/js/builtin/eventbus.js",
    "/js/builtin/websocket-connector.js",
    "/js/builtin/eval.js",
)

# The connector falls back to this path when its src carries no ?live=
DEFAULT_LIVE_PATH = "/__burrow_live__"


def script_tag(src: str) -> str:
    """Render a script tag for *src* (attribute-escaped)."""
    return f'<script type="text/javascript" src="{html.escape(src, quote=True)}"></script>'


def is_html(content_type: str | None) -> bool:
    return bool(content_type) and _HTML_CONTENT.search(content_type) is not None


def append_tags(ctx: Context, tags: Sequence[str]) -> None:
    """Concatenate *tags* onto the end of the body as text."""
    if tags:
        ctx.body = ctx.text + "".join(tags)


@dataclass(frozen=True, slots=True)
class InjectedScript:
    """A script registered with the session.

    ``condition`` receives the request; ``None`` means always inject.
    """

    src: str
    condition: Callable[[Request], bool] | None = None

    def applies_to(self, request: Request) -> bool:
        return self.condition is None or bool(self.condition(request))


class BuiltinScripts:
    """Stage that appends the live-channel client scripts."""

    __slots__ = ("_tags",)

    def __init__(self, client_prefix: str, live_path: str = DEFAULT_LIVE_PATH) -> None:
        prefix = "/" + client_prefix.strip("/")
        sources = [prefix + path for path in BUILTIN_SCRIPTS]
        if live_path != DEFAULT_LIVE_PATH:
            sources[1] += "?" + urlencode({"live": live_path})
        self._tags = tuple(script_tag(src) for src in sources)

    async def __call__(self, ctx: Context, next: Next) -> None:
        if is_html(ctx.content_type):
            append_tags(ctx, self._tags)
        await next()


class InjectedScripts:
    """Stage that appends the session's registered scripts.

    *scripts* is the session's own list, read on every request, so
    scripts registered after the pipeline was prepared still apply.
    """

    __slots__ = ("_scripts",)

    def __init__(self, scripts: list[InjectedScript]) -> None:
        self._scripts = scripts

    async def __call__(self, ctx: Context, next: Next) -> None:
        if is_html(ctx.content_type):
            append_tags(
                ctx,
                [script_tag(s.src) for s in self._scripts if s.applies_to(ctx.request)],
            )
        await next()
