"""``burrow run``: start a session defined in user code.

Resolves an import string to a ``DevServer`` and starts it. The module
configures the session (namespaces, middleware, mounts, scripts) at
import time or in a factory.
"""

import argparse
import sys

from burrow.cli._resolve import resolve_server


def run_server(args: argparse.Namespace) -> None:
    """Start the session named by ``args.server``."""
    try:
        server = resolve_server(args.server)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    server.start()
