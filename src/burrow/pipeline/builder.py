"""Pipeline assembly.

The builder collects router namespaces, user middleware and static
mounts while the session is being configured, then fixes the stage
order once in ``prepare()``::

    body_parser            (left out with if_proxy)
    router
    resources
    static:<client_prefix> (the builtin client bundle)
    static:<prefix>...     (user mounts, registration order)
    <user middleware>...   (registration order)
    page
    api
    dir
    builtin_scripts
    injected_scripts
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from burrow.dispatch.resource import ResourceDispatcher
from burrow.dispatch.router import RouterDispatcher
from burrow.errors import PipelineAlreadyPrepared
from burrow.interceptors import ApiInterceptor, DirInterceptor, PageInterceptor
from burrow.middleware.body import BodyParser
from burrow.middleware.inject import BuiltinScripts, InjectedScripts
from burrow.middleware.static import StaticFiles, StaticMount
from burrow.pipeline.protocol import Handler, Stage, compose, stage_name

if TYPE_CHECKING:
    from burrow.app import DevServer

logger = logging.getLogger("burrow.pipeline")

CLIENT_DIR = Path(__file__).resolve().parent.parent / "client"


class PipelineBuilder:
    """Ordered stage registry for one session.

    Router namespaces stay editable after ``prepare()``: the router
    dispatcher reads them on every request. Middleware and static
    mounts are frozen by it.
    """

    __slots__ = ("_handler", "_middleware", "_mounts", "_namespaces", "_stages")

    def __init__(self) -> None:
        self._namespaces: dict[str, list[Any]] = {}
        self._middleware: list[Stage] = []
        self._mounts: list[StaticMount] = []
        self._stages: tuple[tuple[str, Stage], ...] | None = None
        self._handler: Handler | None = None

    # -- Router namespaces --

    def register_router_namespace(self, name: str, routers: Iterable[Any] = ()) -> list[Any]:
        """Store a fresh router list under *name*, replacing any previous one."""
        self._namespaces[name] = list(routers)
        return self._namespaces[name]

    def get_runtime_routers(self) -> list[Any]:
        """All routers, concatenated in namespace registration order."""
        return [router for routers in self._namespaces.values() for router in routers]

    def update_runtime_routers[T](self, fn: Callable[[list[Any]], T]) -> T:
        return fn(self.get_runtime_routers())

    # -- Registration --

    def add_middleware(self, stage: Stage) -> None:
        self._check_open("use()")
        self._middleware.append(stage)

    def add_mounts(self, mounts: Iterable[StaticMount]) -> None:
        self._check_open("serve()")
        self._mounts.extend(mounts)

    @property
    def mounts(self) -> tuple[StaticMount, ...]:
        return tuple(self._mounts)

    # -- Assembly --

    @property
    def prepared(self) -> bool:
        return self._stages is not None

    def prepare(self, server: DevServer) -> Handler:
        """Fix the stage order and compose the handler.

        Raises:
            PipelineAlreadyPrepared: On any call after the first.
        """
        if self._stages is not None:
            msg = "Pipeline is already prepared"
            raise PipelineAlreadyPrepared(msg)

        config = server.config
        view_root = Path(config.view_root).resolve()

        stages: list[tuple[str, Stage]] = []
        if not config.if_proxy:
            stages.append(("body_parser", BodyParser(config.max_body_size)))
        stages.append(
            ("router", RouterDispatcher(view_root=view_root, sync_data_match=config.sync_data_match))
        )
        stages.append(
            (
                "resources",
                ResourceDispatcher(
                    view_root=view_root,
                    extension=config.extension,
                    sync_data_match=config.sync_data_match,
                    async_data_match=config.async_data_match,
                ),
            )
        )

        client = StaticMount.create(config.client_prefix, CLIENT_DIR, config.static_max_age)
        for mount in (client, *self._mounts):
            stages.append((f"static:{mount.prefix}", StaticFiles(mount)))

        stages.extend((stage_name(stage), stage) for stage in self._middleware)

        stages.append(("page", PageInterceptor(server.renderer)))
        stages.append(("api", ApiInterceptor()))
        stages.append(("dir", DirInterceptor(view_root)))
        stages.append(("builtin_scripts", BuiltinScripts(config.client_prefix, config.live_path)))
        stages.append(("injected_scripts", InjectedScripts(server.injected_scripts)))

        self._stages = tuple(stages)
        self._handler = compose([stage for _, stage in self._stages])
        logger.debug("Pipeline prepared: %s", ", ".join(self.stage_names))
        return self._handler

    @property
    def stages(self) -> tuple[tuple[str, Stage], ...]:
        """``(name, stage)`` pairs in execution order (empty before ``prepare()``)."""
        return self._stages or ()

    @property
    def stage_names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.stages)

    @property
    def handler(self) -> Handler | None:
        return self._handler

    def _check_open(self, operation: str) -> None:
        if self._stages is not None:
            msg = f"{operation} called after the pipeline was prepared"
            raise PipelineAlreadyPrepared(msg)
