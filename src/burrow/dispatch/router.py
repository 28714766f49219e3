"""Router dispatch stage.

Matches the request against the session's runtime routers (flattened
across namespaces, in registration order) and records the first match
as the context's dispatcher. The routers are read on every request, so
plugins can keep editing them through ``update_runtime_routers``.
"""

import logging
from pathlib import Path

from burrow.config import SyncDataMatch
from burrow.dispatch.dispatcher import Dispatcher, DispatchType, resolve_data_path
from burrow.dispatch.route import RouteDescriptor
from burrow.pipeline.context import Context
from burrow.pipeline.protocol import Next

logger = logging.getLogger("burrow.pipeline")


class RouterDispatcher:
    """Stage that turns a runtime route match into a ``Dispatcher``.

    Sync routes point at a page template; their mock data comes from
    ``sync_data_match`` when configured. Async routes point at a JSON
    data file under the view root.
    """

    __slots__ = ("_sync_data_match", "_view_root")

    def __init__(
        self, *, view_root: Path, sync_data_match: SyncDataMatch | None = None
    ) -> None:
        self._view_root = view_root
        self._sync_data_match = sync_data_match

    async def __call__(self, ctx: Context, next: Next) -> None:
        if ctx.dispatcher is None:
            ctx.dispatcher = self._match(ctx)
        await next()

    def _match(self, ctx: Context) -> Dispatcher | None:
        for raw in ctx.server.get_runtime_routers():
            route = RouteDescriptor.coerce(raw)
            if route is None:
                continue
            params = route.match(ctx.method, ctx.path)
            if params is None:
                continue
            logger.debug("%s %s matched runtime route %s", ctx.method, ctx.path, route.url)
            return self._dispatcher_for(route, params)
        return None

    def _dispatcher_for(self, route: RouteDescriptor, params: dict[str, str]) -> Dispatcher:
        target = route.file_path or route.url.strip("/")
        if route.sync:
            data_path = None
            if self._sync_data_match is not None and route.file_path:
                data_path = resolve_data_path(
                    self._view_root, self._sync_data_match(route.file_path)
                )
            return Dispatcher(
                DispatchType.SYNC,
                target,
                data_path=data_path,
                handler=route.handler,
                params=params,
            )
        data_path = resolve_data_path(self._view_root, route.file_path)
        return Dispatcher(
            DispatchType.ASYNC,
            target,
            data_path=data_path,
            handler=route.handler,
            params=params,
        )
