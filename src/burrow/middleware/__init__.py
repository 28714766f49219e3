"""Built-in pipeline stages that are not dispatchers or interceptors.

A stage is any callable matching:
    async def stage(ctx: Context, next: Next) -> None

Built-in stages:
    BodyParser -- Decode request bodies by content type
    StaticFiles -- Serve files under a mounted prefix
    BuiltinScripts -- Append the live-channel client scripts to HTML
    InjectedScripts -- Append session-registered scripts to HTML
"""

from burrow.middleware.body import BodyParser
from burrow.middleware.inject import BuiltinScripts, InjectedScript, InjectedScripts, script_tag
from burrow.middleware.static import StaticFiles, StaticMount

__all__ = [
    "BodyParser",
    "BuiltinScripts",
    "InjectedScript",
    "InjectedScripts",
    "StaticFiles",
    "StaticMount",
    "script_tag",
]
