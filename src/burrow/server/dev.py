"""Development server.

Starts a pounce ASGI server with the live ``DevServer`` object. Single
worker, so the lifespan, the request handlers and the live channel all
share one event loop.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pounce.server import Server

    from burrow._internal.asgi import ASGIApp
    from burrow.config import ServerConfig
    from burrow.server.bootstrap import Transport

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    """Attach a stderr handler to the ``burrow`` logger hierarchy.

    Pounce configures its own loggers when it starts; burrow's banner and
    live-channel messages need one of their own.
    """
    logger = logging.getLogger("burrow")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt="%H:%M:%S"))
        logger.addHandler(handler)


def create_dev_server(
    app: ASGIApp,
    config: ServerConfig,
    transport: Transport,
    *,
    lifecycle_collector: object | None = None,
) -> Server:
    """Build the pounce server for *app*.

    Pounce's ``run()`` takes an import string (e.g., ``"myapp:server"``),
    but burrow has a live ``DevServer`` object. We use ``pounce.Server``
    directly with the ASGI callable.

    Args:
        app: ASGI callable (the ``DevServer`` instance).
        config: Session configuration; host, port, body limit and log
            level are forwarded.
        transport: Plain or TLS; TLS forwards the certificate pair.
        lifecycle_collector: Optional Pounce LifecycleCollector for
            observability.  Forwarded to the Pounce Server.
    """
    from pounce.config import ServerConfig as PounceConfig
    from pounce.server import Server

    pounce_config = PounceConfig(
        host=config.host,
        port=config.port,
        workers=1,
        reload=False,
        debug=config.debug,
        log_level=config.log_level,
        max_request_size=config.max_body_size,
        ssl_certfile=str(transport.certfile) if transport.certfile else None,
        ssl_keyfile=str(transport.keyfile) if transport.keyfile else None,
    )
    return Server(pounce_config, app, lifecycle_collector=lifecycle_collector)

