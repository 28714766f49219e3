"""Runtime route descriptors and path matching.

Runtime routers are opaque to the pipeline builder; the default router
dispatcher understands ``RouteDescriptor`` instances and plain mappings
with the same keys::

    server.register_router_namespace("mock", [
        RouteDescriptor("/user/{id:int}", file_path="user/detail.html"),
        {"method": "POST", "url": "/api/login", "sync": False, "filePath": "login.json"},
    ])

Path parameters use ``{name}``, ``{name:int}``, ``{name:float}`` and
``{name:path}``; the ``:name`` form is accepted too.
"""

import functools
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from burrow.errors import ConfigurationError

# Regex pattern for each supported converter
CONVERTERS: dict[str, str] = {
    "str": r"[^/]+",
    "int": r"\d+",
    "float": r"\d+(?:\.\d+)?",
    "path": r".+",
}


@functools.lru_cache(maxsize=512)
def compile_path(url: str) -> re.Pattern[str]:
    """Compile a route URL into an anchored regex with named groups.

    Examples::

        "/users"             -> ^/users/?$
        "/users/{id:int}"    -> ^/users/(?P<id>\\d+)/?$
        "/files/{rest:path}" -> ^/files/(?P<rest>.+)/?$
    """
    parts: list[str] = []
    for segment in url.strip("/").split("/"):
        if not segment:
            continue
        if segment.startswith("{") and segment.endswith("}"):
            name, _, kind = segment[1:-1].partition(":")
            kind = kind or "str"
            if kind not in CONVERTERS:
                msg = f"Unknown path converter {kind!r} in route {url!r}"
                raise ConfigurationError(msg)
            parts.append(f"(?P<{name}>{CONVERTERS[kind]})")
        elif segment.startswith(":"):
            parts.append(f"(?P<{segment[1:]}>{CONVERTERS['str']})")
        else:
            parts.append(re.escape(segment))
    return re.compile("^/" + "/".join(parts) + "/?$")


@dataclass(frozen=True, slots=True)
class RouteDescriptor:
    """A runtime route.

    ``sync`` routes render ``file_path`` as a page template; async routes
    answer JSON, read from the ``file_path`` data file or returned by
    ``handler``. A handler on a sync route supplies template data.
    """

    url: str
    method: str = "GET"
    sync: bool = True
    file_path: str | None = None
    handler: Callable[..., Any] | None = None

    def match(self, method: str, path: str) -> dict[str, str] | None:
        """Return path params when this route answers *method* *path*."""
        if self.method.upper() not in ("*", "ALL", method.upper()):
            return None
        found = compile_path(self.url).match(path)
        if found is None:
            return None
        return found.groupdict()

    @classmethod
    def coerce(cls, value: object) -> RouteDescriptor | None:
        """Normalize a descriptor; ``None`` for shapes this module doesn't know."""
        if isinstance(value, RouteDescriptor):
            return value
        if isinstance(value, Mapping) and "url" in value:
            return cls(
                url=str(value["url"]),
                method=str(value.get("method", "GET")),
                sync=bool(value.get("sync", True)),
                file_path=value.get("file_path", value.get("filePath")),
                handler=value.get("handler"),
            )
        return None
