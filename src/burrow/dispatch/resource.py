"""Static-resource dispatch stage.

Maps the request path onto the view root when no runtime route matched:

- ``/user/list.html`` (with ``extension="html"``) → render that template
- a path ``async_data_match`` maps to an existing JSON file → API data
- a directory → directory listing

Like the static file middleware, the resolved path must stay inside the
view root; anything that escapes it is ignored.
"""

from pathlib import Path
from urllib.parse import unquote

from burrow.config import AsyncDataMatch, SyncDataMatch
from burrow.dispatch.dispatcher import Dispatcher, DispatchType, resolve_data_path
from burrow.pipeline.context import Context
from burrow.pipeline.protocol import Next


class ResourceDispatcher:
    """Stage that dispatches view-root resources for GET and HEAD requests."""

    __slots__ = ("_async_data_match", "_suffix", "_sync_data_match", "_view_root")

    def __init__(
        self,
        *,
        view_root: str | Path,
        extension: str,
        sync_data_match: SyncDataMatch | None = None,
        async_data_match: AsyncDataMatch | None = None,
    ) -> None:
        self._view_root = Path(view_root).resolve()
        self._suffix = "." + extension.lstrip(".")
        self._sync_data_match = sync_data_match
        self._async_data_match = async_data_match

    async def __call__(self, ctx: Context, next: Next) -> None:
        if ctx.dispatcher is None and ctx.method in ("GET", "HEAD"):
            ctx.dispatcher = self.resolve(ctx.path)
        await next()

    def resolve(self, url_path: str) -> Dispatcher | None:
        """Work out what *url_path* refers to under the view root."""
        relative = unquote(url_path).lstrip("/")
        candidate = (self._view_root / relative).resolve() if relative else self._view_root
        if not candidate.is_relative_to(self._view_root):
            return None

        if candidate.is_file() and candidate.suffix == self._suffix:
            template = candidate.relative_to(self._view_root).as_posix()
            data_path = None
            if self._sync_data_match is not None:
                data_path = resolve_data_path(self._view_root, self._sync_data_match(template))
            return Dispatcher(DispatchType.SYNC, template, data_path=data_path)

        if self._async_data_match is not None:
            data_path = resolve_data_path(self._view_root, self._async_data_match(url_path))
            if data_path is not None and data_path.is_file():
                return Dispatcher(DispatchType.ASYNC, url_path, data_path=data_path)

        if candidate.is_dir():
            return Dispatcher(DispatchType.DIR, candidate)

        return None
