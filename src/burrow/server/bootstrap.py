"""Server bootstrap: transport selection and post-listen side effects.

The transport is picked when the session is created, so a missing
certificate fails fast. Everything that needs a listening socket runs
from the ASGI ``lifespan.startup`` event, which pounce sends after
binding: the status banner, the browser, the desktop notification,
and finally the live channel.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

from burrow.errors import ConfigurationError
from burrow.live.channel import LiveChannel
from burrow.server import system

if TYPE_CHECKING:
    from burrow.app import DevServer
    from burrow.config import ServerConfig

logger = logging.getLogger("burrow.server")

CERTIFICATE_DIR = Path(__file__).resolve().parent.parent / "certificate"
DEFAULT_CERTFILE = CERTIFICATE_DIR / "localhost.crt"
DEFAULT_KEYFILE = CERTIFICATE_DIR / "localhost.key"


class ServerState(StrEnum):
    """Session lifecycle: CREATED → PREPARED → LISTENING → STOPPED."""

    CREATED = "created"
    PREPARED = "prepared"
    LISTENING = "listening"
    STOPPED = "stopped"


@dataclass(frozen=True, slots=True)
class Transport:
    """Plain HTTP, or HTTPS with a certificate pair."""

    scheme: str
    certfile: Path | None = None
    keyfile: Path | None = None

    @property
    def secure(self) -> bool:
        return self.scheme == "https"


def select_transport(config: ServerConfig) -> Transport:
    """Pick the transport for *config*.

    ``secure`` uses ``ssl_certfile`` / ``ssl_keyfile`` when set and the
    bundled localhost pair otherwise.

    Raises:
        ConfigurationError: A certificate or key file does not exist.
    """
    if not config.secure:
        return Transport("http")

    certfile = Path(config.ssl_certfile) if config.ssl_certfile else DEFAULT_CERTFILE
    keyfile = Path(config.ssl_keyfile) if config.ssl_keyfile else DEFAULT_KEYFILE
    for label, path in (("certificate", certfile), ("key", keyfile)):
        if not path.is_file():
            msg = f"TLS {label} file not found: {path}"
            raise ConfigurationError(msg)
    return Transport("https", certfile, keyfile)


def banner_lines(scheme: str, port: int, address: str) -> list[str]:
    lines = [f"Server build successfully on {scheme}://127.0.0.1:{port}/"]
    if address:
        lines.append(f"Local Address: {scheme}://{address}:{port}/")
    return lines


async def after_listen(server: DevServer) -> LiveChannel:
    """Run the post-listen side effects and create the live channel."""
    config = server.config
    scheme = server.transport.scheme
    port = server.port
    address = system.local_ip()

    lines = banner_lines(scheme, port, address)
    for line in lines:
        logger.info(line)

    if config.open_browser and address:
        await asyncio.to_thread(system.open_browser, f"{scheme}://{address}:{port}/")
    if config.notify:
        await asyncio.to_thread(system.notify, "burrow", "\n".join(lines))

    return LiveChannel(server.pending_messages)
