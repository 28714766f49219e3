"""The burrow development server session.

Mutable during setup (router namespaces, middleware, static mounts,
injected scripts). The stage order is fixed by ``prepare()``, which
``start()`` and the first request run automatically when needed.
"""

import threading
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

from burrow._internal.asgi import Receive, Scope, Send
from burrow.config import ServerConfig
from burrow.errors import ChannelNotReady, ConfigurationError
from burrow.http.request import Request
from burrow.live.channel import LiveChannel
from burrow.live.handler import handle_websocket
from burrow.live.messages import BroadcastResult, LiveMessage
from burrow.middleware.inject import InjectedScript
from burrow.middleware.static import coerce_mounts
from burrow.pipeline.builder import PipelineBuilder
from burrow.pipeline.protocol import Handler, MiddlewareFactory
from burrow.server.bootstrap import ServerState, Transport, after_listen, select_transport
from burrow.server.handler import handle_request
from burrow.templating.integration import Renderer


class DevServer:
    """One development server session.

    Several sessions can live in one process; all state hangs off the
    instance::

        server = DevServer(ServerConfig(view_root="views", port=3000))
        server.register_router_namespace("mock", [
            RouteDescriptor("/user/{id}", file_path="user.html"),
        ])
        server.serve("/assets", "static")
        server.inject_script("/assets/debug.js", lambda request: request.path.startswith("/admin"))
        server.eval_always("console.log('connected')")
        server.start()

    Thread safety:
        Setup happens on one thread before ``start()``. ``prepare()`` uses
        a lock + double-check so concurrent first requests assemble the
        pipeline once. Live operations (``eval``, ``livereload``) belong
        on the server's event loop.
    """

    __slots__ = (
        "_channel",
        "_handler",
        "_injected_scripts",
        "_pending",
        "_pipeline",
        "_pounce",
        "_prepare_lock",
        "_renderer",
        "_state",
        "_transport",
        "config",
    )

    def __init__(self, config: ServerConfig | None = None) -> None:
        self.config: ServerConfig = config or ServerConfig()
        # Fails fast on missing certificate files
        self._transport: Transport = select_transport(self.config)
        self._renderer: Renderer = self.config.render(
            Path(self.config.view_root), self.config.engine_config
        )
        self._pipeline = PipelineBuilder()
        self._injected_scripts: list[InjectedScript] = []
        self._pending: list[LiveMessage] = []
        self._channel: LiveChannel | None = None
        self._handler: Handler | None = None
        self._pounce: Any = None
        self._prepare_lock = threading.Lock()
        self._state = ServerState.CREATED

        for name, routers in self.config.runtime_routers.items():
            self._pipeline.register_router_namespace(name, routers)

    # -- Read-only session state --

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def renderer(self) -> Renderer:
        return self._renderer

    @property
    def pipeline(self) -> PipelineBuilder:
        return self._pipeline

    @property
    def channel(self) -> LiveChannel | None:
        """The live channel; ``None`` until the server is listening."""
        return self._channel

    @property
    def pending_messages(self) -> list[LiveMessage]:
        """Messages replayed to every new live connection (only ever grows)."""
        return self._pending

    @property
    def injected_scripts(self) -> list[InjectedScript]:
        return self._injected_scripts

    @property
    def port(self) -> int:
        """The bound port once pounce is listening, the configured one before."""
        bound = getattr(self._pounce, "bound_addr", None)
        if bound:
            return bound[1]
        return self.config.port

    # -- Router namespaces --

    def register_router_namespace(self, name: str, routers: Iterable[Any] = ()) -> list[Any]:
        """Store *routers* under *name*, replacing that namespace's list.

        The namespace keeps its original position when re-registered.
        Returns the stored list.
        """
        return self._pipeline.register_router_namespace(name, routers)

    def get_runtime_routers(self) -> list[Any]:
        """All routers, namespaces concatenated in registration order."""
        return self._pipeline.get_runtime_routers()

    def update_runtime_routers[T](self, fn: Callable[[list[Any]], T]) -> T:
        """Call *fn* with the flattened routers and return its result."""
        return self._pipeline.update_runtime_routers(fn)

    # -- Pipeline registration --

    def use(self, middleware_factory: MiddlewareFactory) -> None:
        """Add user middleware built by ``middleware_factory(self)``.

        Middleware runs after the static mounts and before the
        interceptors, in registration order.
        """
        stage = middleware_factory(self)
        if not callable(stage):
            msg = f"Middleware factory {middleware_factory!r} returned {stage!r}, not a stage"
            raise ConfigurationError(msg)
        self._pipeline.add_middleware(stage)

    def serve(
        self,
        prefix: str | Iterable[Mapping[str, Any]],
        directory: str | Path | None = None,
        max_age: int | None = None,
    ) -> None:
        """Mount static directories.

        Accepts a single mount or a list of ``{"prefix", "dir", "max_age"}``
        mappings::

            server.serve("assets", "static")  # served at /assets
            server.serve([{"prefix": "/img", "dir": "images", "maxAge": 60}])
        """
        default_max_age = self.config.static_max_age if max_age is None else max_age
        self._pipeline.add_mounts(coerce_mounts(prefix, directory, default_max_age))

    def inject_script(
        self,
        script: str | InjectedScript,
        condition: Callable[[Request], bool] | None = None,
    ) -> InjectedScript:
        """Append a script tag to HTML responses where *condition* holds.

        Allowed at any time; the injection stage reads the live list.
        """
        if isinstance(script, str):
            script = InjectedScript(script, condition)
        self._injected_scripts.append(script)
        return script

    def prepare(self) -> Handler:
        """Assemble the pipeline. Allowed once.

        Raises:
            PipelineAlreadyPrepared: On a second call.
        """
        with self._prepare_lock:
            self._handler = self._pipeline.prepare(self)
            self._state = ServerState.PREPARED
            return self._handler

    def _ensure_prepared(self) -> Handler:
        if self._handler is not None:
            return self._handler
        with self._prepare_lock:
            if self._handler is None:
                self._handler = self._pipeline.prepare(self)
                self._state = ServerState.PREPARED
            return self._handler

    # -- Live channel --

    def eval(self, code: str) -> BroadcastResult:
        """Run *code* in every connected browser right now.

        Raises:
            ChannelNotReady: Before the server is listening or after shutdown.
        """
        return self._require_channel("eval").eval(code)

    def livereload(self, url: str) -> BroadcastResult:
        """Tell connected browsers that *url* changed.

        Raises:
            ChannelNotReady: Before the server is listening or after shutdown.
        """
        return self._require_channel("livereload").livereload(url)

    def eval_always(self, code: str) -> None:
        """Queue *code* for every browser that connects from now on.

        Not sent to browsers that are already connected.
        """
        self._pending.append(LiveMessage("eval", code))

    def _require_channel(self, operation: str) -> LiveChannel:
        channel = self._channel
        if channel is None or channel.closed or self._state is not ServerState.LISTENING:
            msg = f"{operation}() needs a listening server (state: {self._state})"
            raise ChannelNotReady(msg)
        return channel

    # -- Running --

    def start(self, *, lifecycle_collector: object | None = None) -> None:
        """Prepare the pipeline if needed and serve until interrupted (blocking)."""
        self._ensure_prepared()

        from burrow.server.dev import configure_logging, create_dev_server

        configure_logging(self.config.log_level)

        self._pounce = create_dev_server(
            self,
            self.config,
            self._transport,
            lifecycle_collector=lifecycle_collector,
        )
        try:
            self._pounce.run()
        finally:
            self._state = ServerState.STOPPED

    def stop(self) -> None:
        """Ask a running ``start()`` to return. Thread-safe."""
        if self._pounce is not None:
            self._pounce.shutdown()

    async def shutdown(self) -> None:
        """Close live connections and mark the session stopped."""
        channel = self._channel
        self._state = ServerState.STOPPED
        if channel is not None:
            await channel.close()

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        scope_type = scope["type"]
        if scope_type == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        # Pounce per-worker lifecycle scopes; nothing to do per worker
        if scope_type in ("pounce.worker.startup", "pounce.worker.shutdown"):
            return

        if scope_type == "websocket":
            await handle_websocket(
                self._channel, scope, receive, send, live_path=self.config.live_path
            )
            return

        await handle_request(
            scope,
            receive,
            send,
            server=self,
            handler=self._ensure_prepared(),
            debug=self.config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Startup runs once the sockets are bound, so it is where the
        post-listen side effects happen and the live channel is created.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_prepared()
                    self._channel = await after_listen(self)
                    self._state = ServerState.LISTENING
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    await send(
                        {
                            "type": "lifespan.startup.failed",
                            "message": str(exc),
                        }
                    )
                    return

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return
