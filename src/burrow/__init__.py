"""Burrow: a local development server with live browser control.

Serves page templates with mock data, mock JSON APIs, static files and
directory listings through an ordered request pipeline, and keeps a
WebSocket channel open to every page it serves so it can push code and
reload notices to the browser.

Basic usage::

    from burrow import DevServer, ServerConfig

    server = DevServer(ServerConfig(view_root="views", open_browser=True))
    server.serve("/static", "public")
    server.eval_always("console.log('hello from burrow')")
    server.start()

From the command line::

    burrow serve views --port 3000 --open
"""

__version__ = "0.1.0"
__all__ = [
    "BroadcastResult",
    "BurrowError",
    "ChannelNotReady",
    "ConfigurationError",
    "Context",
    "DevServer",
    "HTTPError",
    "InjectedScript",
    "LifecycleError",
    "LiveMessage",
    "Next",
    "NotFound",
    "PipelineAlreadyPrepared",
    "Request",
    "Response",
    "RouteDescriptor",
    "ServerConfig",
    "ServerState",
    "Stage",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import burrow`` fast while providing a clean top-level API.
    """
    if name == "DevServer":
        from burrow.app import DevServer

        return DevServer

    if name == "ServerConfig":
        from burrow.config import ServerConfig

        return ServerConfig

    if name == "ServerState":
        from burrow.server.bootstrap import ServerState

        return ServerState

    if name == "Request":
        from burrow.http.request import Request

        return Request

    if name == "Response":
        from burrow.http.response import Response

        return Response

    if name == "Context":
        from burrow.pipeline.context import Context

        return Context

    if name in ("Next", "Stage"):
        from burrow.pipeline import protocol as _protocol

        return getattr(_protocol, name)

    if name == "RouteDescriptor":
        from burrow.dispatch.route import RouteDescriptor

        return RouteDescriptor

    if name == "InjectedScript":
        from burrow.middleware.inject import InjectedScript

        return InjectedScript

    if name in ("BroadcastResult", "LiveMessage"):
        from burrow.live import messages as _messages

        return getattr(_messages, name)

    if name in (
        "BurrowError",
        "ChannelNotReady",
        "ConfigurationError",
        "HTTPError",
        "LifecycleError",
        "NotFound",
        "PipelineAlreadyPrepared",
    ):
        from burrow import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
