"""Session import resolution: ``"module:attribute"`` strings to DevServer instances."""

import importlib

from burrow.app import DevServer


def resolve_server(import_string: str) -> DevServer:
    """Resolve an import string to a ``DevServer``.

    Accepts ``"module:attribute"`` format.  When the attribute portion
    is omitted, defaults to ``"server"`` (e.g. ``"devserver"`` resolves
    to ``devserver.server``).

    Supports factory functions: if the resolved object is callable and
    not a ``DevServer``, it is called with no arguments.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not a ``DevServer`` or factory.
    """
    module_path, _, attr_name = import_string.partition(":")
    if not attr_name:
        attr_name = "server"

    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name)

    if callable(obj) and not isinstance(obj, DevServer):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, DevServer):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a burrow.DevServer"
        raise TypeError(msg)

    return obj
