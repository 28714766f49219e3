"""``burrow serve``: serve a view directory with the default pipeline."""

import argparse
import sys
from pathlib import Path

from burrow.app import DevServer
from burrow.config import ServerConfig
from burrow.errors import ConfigurationError


def parse_mount(value: str) -> tuple[str, str]:
    """Split a ``PREFIX=DIR`` mount argument."""
    prefix, sep, directory = value.partition("=")
    if not sep or not prefix or not directory:
        msg = f"Static mounts look like PREFIX=DIR, got {value!r}"
        raise ConfigurationError(msg)
    return prefix, directory


def build_server(args: argparse.Namespace) -> DevServer:
    """Create the session described by the ``serve`` arguments."""
    view_root = Path(args.directory)
    if not view_root.is_dir():
        msg = f"View root {str(view_root)!r} is not a directory"
        raise ConfigurationError(msg)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        secure=args.secure,
        open_browser=args.open_browser,
        notify=args.notify,
        if_proxy=args.if_proxy,
        extension=args.extension,
        view_root=view_root,
        debug=args.debug,
    )
    server = DevServer(config)
    for value in args.static:
        prefix, directory = parse_mount(value)
        server.serve(prefix, directory)
    return server


def serve_directory(args: argparse.Namespace) -> None:
    """Build the session and serve until interrupted."""
    try:
        server = build_server(args)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    server.start()
