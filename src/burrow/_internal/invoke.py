"""Invoke helpers: call sync or async callables uniformly.

Route handlers on runtime router descriptors can be ``def`` or
``async def``. Any code that calls one must handle both cases. This
module keeps the sync/async check in exactly one place.

Usage::

    from burrow._internal.invoke import invoke

    data = await invoke(descriptor.handler, ctx)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable.

    Works with both sync and async callables::

        # sync: returns immediately, no await needed
        def user(ctx):
            return {"name": "fox"}

        # async: returns coroutine, awaited automatically
        async def user(ctx):
            return await load_user(ctx.params["id"])
    """
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
