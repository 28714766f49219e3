"""API interceptor: answers ``async`` dispatches with JSON."""

import json

from burrow._internal.invoke import invoke
from burrow.dispatch.dispatcher import DispatchType, read_data_file
from burrow.pipeline.context import Context
from burrow.pipeline.protocol import Next

JSON = "application/json; charset=utf-8"


class ApiInterceptor:
    """Stage that serializes mock API data.

    A route handler's return value wins over the data file. Without a
    handler and without a data file the response stays unfinalized and
    the request ends as 404.
    """

    __slots__ = ()

    async def __call__(self, ctx: Context, next: Next) -> None:
        dispatcher = ctx.dispatcher
        if not ctx.finalized and dispatcher is not None and dispatcher.type is DispatchType.ASYNC:
            if dispatcher.handler is not None:
                data = await invoke(dispatcher.handler, ctx)
                ctx.respond(json.dumps(data, ensure_ascii=False), content_type=JSON)
            else:
                found, data = read_data_file(dispatcher.data_path)
                if found:
                    ctx.respond(json.dumps(data, ensure_ascii=False), content_type=JSON)
        await next()
