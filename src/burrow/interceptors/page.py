"""Page interceptor: renders ``sync`` dispatches through the session renderer."""

import logging
from collections.abc import Mapping
from typing import Any

from burrow._internal.invoke import invoke
from burrow.dispatch.dispatcher import DispatchType, Dispatcher, read_data_file
from burrow.pipeline.context import HTML, Context
from burrow.pipeline.protocol import Next
from burrow.templating.integration import Renderer

logger = logging.getLogger("burrow.pipeline")


class PageInterceptor:
    """Stage that renders the dispatched template.

    Template data is the JSON file at ``data_path`` (an empty mapping when
    the file is missing) overlaid by the route handler's result::

        RouteDescriptor("/user/{id}", file_path="user.html",
                        handler=lambda ctx: {"id": ctx.params["id"]})
    """

    __slots__ = ("_renderer",)

    def __init__(self, renderer: Renderer) -> None:
        self._renderer = renderer

    async def __call__(self, ctx: Context, next: Next) -> None:
        dispatcher = ctx.dispatcher
        if not ctx.finalized and dispatcher is not None and dispatcher.type is DispatchType.SYNC:
            data = await self._data(ctx, dispatcher)
            logger.debug("Rendering %s for %s", dispatcher.target, ctx.path)
            ctx.respond(self._renderer.render(str(dispatcher.target), data), content_type=HTML)
        await next()

    async def _data(self, ctx: Context, dispatcher: Dispatcher) -> dict[str, Any]:
        found, value = read_data_file(dispatcher.data_path)
        data: dict[str, Any] = {}
        if found:
            if not isinstance(value, Mapping):
                msg = f"Page data in {dispatcher.data_path} must be a JSON object"
                raise TypeError(msg)
            data.update(value)
        if dispatcher.handler is not None:
            extra = await invoke(dispatcher.handler, ctx)
            if extra is not None:
                if not isinstance(extra, Mapping):
                    msg = f"Page handler for {ctx.path} must return a mapping, got {type(extra).__name__}"
                    raise TypeError(msg)
                data.update(extra)
        return data
