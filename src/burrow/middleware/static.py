"""Static file serving stage.

Serves files from a directory for matching URL prefixes. One stage is
built per mount; the builtin client bundle is mounted first, user
mounts follow in registration order.

Falls through to the next stage for non-matching paths and missing files.
"""

import mimetypes
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from burrow.errors import ConfigurationError
from burrow.pipeline.context import Context
from burrow.pipeline.protocol import Next

DEFAULT_MAX_AGE = 31536000


def normalize_prefix(prefix: str) -> str:
    """Ensure a leading slash and drop trailing ones (``"/"`` stays ``"/"``)."""
    return "/" + prefix.strip("/")


@dataclass(frozen=True, slots=True)
class StaticMount:
    """A URL prefix mapped onto a directory."""

    prefix: str
    directory: Path
    max_age: int = DEFAULT_MAX_AGE

    @classmethod
    def create(
        cls, prefix: str, directory: str | Path, max_age: int | None = None
    ) -> StaticMount:
        return cls(
            prefix=normalize_prefix(prefix),
            directory=Path(directory).resolve(),
            max_age=DEFAULT_MAX_AGE if max_age is None else int(max_age),
        )

    @classmethod
    def from_mapping(cls, entry: Mapping[str, Any], default_max_age: int) -> StaticMount:
        """Build a mount from ``{"prefix", "dir", "max_age"}`` (``maxAge`` too)."""
        try:
            prefix = entry["prefix"]
            directory = entry["dir"]
        except KeyError as exc:
            msg = f"Static mount needs 'prefix' and 'dir', got {dict(entry)!r}"
            raise ConfigurationError(msg) from exc
        max_age = entry.get("max_age", entry.get("maxAge", default_max_age))
        return cls.create(prefix, directory, max_age)


def coerce_mounts(
    prefix: str | Iterable[Mapping[str, Any]],
    directory: str | Path | None,
    max_age: int,
) -> list[StaticMount]:
    """Normalize both ``serve()`` call forms into a list of mounts."""
    if isinstance(prefix, str):
        if directory is None:
            msg = f"serve({prefix!r}) needs a directory"
            raise ConfigurationError(msg)
        return [StaticMount.create(prefix, directory, max_age)]
    return [StaticMount.from_mapping(entry, max_age) for entry in prefix]


class StaticFiles:
    """Stage that serves files under one mount.

    Security: resolves symlinks and verifies the final path is within
    the mount directory to prevent path traversal.
    """

    __slots__ = ("_cache_control", "_mount")

    def __init__(self, mount: StaticMount) -> None:
        self._mount = mount
        self._cache_control = f"public, max-age={mount.max_age}"

    @property
    def mount(self) -> StaticMount:
        return self._mount

    async def __call__(self, ctx: Context, next: Next) -> None:
        if ctx.finalized or ctx.method not in ("GET", "HEAD"):
            await next()
            return

        relative = self._relative(ctx.path)
        if relative is None:
            await next()
            return

        directory = self._mount.directory
        file_path = (directory / relative).resolve() if relative else directory
        if not file_path.is_relative_to(directory):
            ctx.respond("Forbidden", content_type="text/plain; charset=utf-8", status=403)
            await next()
            return

        if file_path.is_file():
            self._serve_file(ctx, file_path)
        await next()

    def _relative(self, path: str) -> str | None:
        prefix = self._mount.prefix
        if prefix == "/":
            return path.lstrip("/")
        if path != prefix and not path.startswith(prefix + "/"):
            return None
        return path[len(prefix) :].lstrip("/")

    def _serve_file(self, ctx: Context, file_path: Path) -> None:
        content_type, _ = mimetypes.guess_type(str(file_path))
        if content_type is None:
            content_type = "application/octet-stream"
        elif content_type.startswith("text/") or content_type == "application/javascript":
            content_type += "; charset=utf-8"

        body = file_path.read_bytes()
        ctx.respond(body, content_type=content_type, status=200)
        ctx.set_header("Cache-Control", self._cache_control)
