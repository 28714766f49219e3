"""Kida environment setup and the renderer seam.

The page interceptor only needs something with ``render(name, context)``.
``KidaRenderer`` is the default, created once per session from
``ServerConfig.view_root`` and ``ServerConfig.engine_config``.
"""

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Protocol

from kida import Environment, FileSystemLoader

from burrow.templating.filters import BUILTIN_FILTERS


class Renderer(Protocol):
    """Template-rendering collaborator used by the page interceptor."""

    def render(self, template: str, context: Mapping[str, Any]) -> str: ...


# Constructs a renderer from (view_root, engine_config)
type RenderFactory = Callable[[Path, Mapping[str, Any]], Renderer]


class KidaRenderer:
    """Render page templates from the view root with kida.

    ``engine_config`` is forwarded to ``kida.Environment`` so callers can
    tune escaping and whitespace handling::

        ServerConfig(engine_config={"autoescape": False})
    """

    __slots__ = ("env",)

    def __init__(self, view_root: Path, engine_config: Mapping[str, Any] | None = None) -> None:
        options: dict[str, Any] = {
            "autoescape": True,
            "auto_reload": True,
            "trim_blocks": True,
            "lstrip_blocks": True,
            # Lenient attribute access; undefined top-level names still raise
            "strict_undefined": False,
        }
        options.update(engine_config or {})
        self.env = Environment(loader=FileSystemLoader(str(view_root)), **options)
        self.env.update_filters(BUILTIN_FILTERS)

    def render(self, template: str, context: Mapping[str, Any]) -> str:
        """Render *template* (relative to the view root) to a string."""
        return self.env.get_template(template).render(dict(context))


def create_listing_environment() -> Environment:
    """Environment for templates that live in code (directory listings)."""
    env = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)
    env.update_filters(BUILTIN_FILTERS)
    return env
