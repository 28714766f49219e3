"""Server configuration.

ServerConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from burrow.errors import ConfigurationError
from burrow.templating.integration import KidaRenderer, RenderFactory

# Names pounce accepts for its own log_level
LOG_LEVELS = frozenset({"debug", "info", "warning", "error", "critical"})

# Maps a page template (relative to view_root) to its mock data file
type SyncDataMatch = Callable[[str], str | Path | None]

# Maps an API request path to its mock data file
type AsyncDataMatch = Callable[[str], str | Path | None]


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Development server configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ServerConfig(port=3000, view_root="views", open_browser=True)
    """

    # Transport
    host: str = "0.0.0.0"
    port: int = 3000
    secure: bool = False
    ssl_certfile: str | Path | None = None  # Defaults to the bundled localhost.crt
    ssl_keyfile: str | Path | None = None  # Defaults to the bundled localhost.key

    # Post-listen side effects
    open_browser: bool = False
    notify: bool = True

    # Pipeline
    if_proxy: bool = False  # Upstream proxy already parsed the body
    max_body_size: int = 16 * 1024 * 1024  # 16 MB

    # Dispatchers
    extension: str = "html"
    view_root: str | Path = "."
    sync_data_match: SyncDataMatch | None = None
    async_data_match: AsyncDataMatch | None = None
    runtime_routers: Mapping[str, Sequence[Any]] = field(default_factory=dict)

    # Templates
    render: RenderFactory = KidaRenderer
    engine_config: Mapping[str, Any] = field(default_factory=dict)

    # Static files
    static_max_age: int = 31536000  # One year

    # Reserved paths
    client_prefix: str = "/__burrow_client__"
    live_path: str = "/__burrow_live__"

    # Diagnostics
    debug: bool = False
    log_level: str = "info"

    def __post_init__(self) -> None:
        if not 0 <= self.port <= 65535:
            msg = f"port must be between 0 and 65535, got {self.port}"
            raise ConfigurationError(msg)
        if not self.extension.strip("."):
            msg = "extension must not be empty"
            raise ConfigurationError(msg)
        for name in ("client_prefix", "live_path"):
            value = getattr(self, name)
            if not value.startswith("/") or value == "/":
                msg = f"{name} must be an absolute path below '/', got {value!r}"
                raise ConfigurationError(msg)
        if self.log_level.lower() not in LOG_LEVELS:
            msg = f"log_level must be one of {sorted(LOG_LEVELS)}, got {self.log_level!r}"
            raise ConfigurationError(msg)
