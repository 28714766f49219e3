"""Stage protocol, Next type alias, and stage composition.

A stage is any callable matching::

    async def my_stage(ctx: Context, next: Next) -> None: ...

No base class required. The pipeline checks the shape, not the lineage.
A stage runs the rest of the pipeline by awaiting ``next()``; returning
without calling it stops the chain at that stage.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING, Protocol

from burrow.pipeline.context import Context

if TYPE_CHECKING:
    from burrow.app import DevServer

# Continue with the next stage
type Next = Callable[[], Awaitable[None]]

# The composed pipeline
type Handler = Callable[[Context], Awaitable[None]]


class Stage(Protocol):
    """Protocol for pipeline stages.

    Accepts both functions and callable objects::

        # Function stage
        async def timing(ctx: Context, next: Next) -> None:
            start = time.monotonic()
            await next()
            ctx.set_header("X-Time", f"{time.monotonic() - start:.3f}")

        # Class stage
        class Banner:
            async def __call__(self, ctx: Context, next: Next) -> None:
                ...
    """

    async def __call__(self, ctx: Context, next: Next) -> None: ...


# What ``DevServer.use()`` accepts: called once with the session
type MiddlewareFactory = Callable[[DevServer], Stage]


def compose(stages: Sequence[Stage]) -> Handler:
    """Compose *stages* into one handler that runs them in order.

    Each stage receives a ``next`` bound to the following stage. Calling
    ``next`` twice from the same stage is an error.
    """
    chain = tuple(stages)

    async def handler(ctx: Context) -> None:
        async def end() -> None:
            return

        # Wrap right-to-left so the first stage ends up outermost
        call: Next = end
        for stage in reversed(chain):
            call = _link(stage, ctx, call)
        await call()

    return handler


def _link(stage: Stage, ctx: Context, downstream: Next) -> Next:
    called = False

    async def next_stage() -> None:
        nonlocal called
        if called:
            msg = f"next() called more than once by {stage!r}"
            raise RuntimeError(msg)
        called = True
        await downstream()

    async def run() -> None:
        await stage(ctx, next_stage)

    return run


def stage_name(stage: object) -> str:
    """Human-readable name for a stage (function or callable object)."""
    return getattr(stage, "__name__", None) or type(stage).__name__
