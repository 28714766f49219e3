"""Burrow CLI: serve a directory or run a configured session.

Entry point registered as ``burrow`` in ``pyproject.toml``::

    [project.scripts]
    burrow = "burrow.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``burrow`` command."""
    parser = argparse.ArgumentParser(
        prog="burrow",
        description="Burrow: a local development server with live browser control.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- burrow serve ------------------------------------------------------
    serve_parser = subparsers.add_parser("serve", help="Serve a view directory")
    serve_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="View root: templates, mock data and static files (default: .)",
    )
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind host address")
    serve_parser.add_argument("--port", type=int, default=3000, help="Bind port number")
    serve_parser.add_argument(
        "--secure",
        action="store_true",
        help="Serve HTTPS with the bundled localhost certificate",
    )
    serve_parser.add_argument(
        "--open",
        dest="open_browser",
        action="store_true",
        help="Open the default browser once listening",
    )
    serve_parser.add_argument(
        "--proxy",
        dest="if_proxy",
        action="store_true",
        help="Leave request bodies unparsed for an upstream proxy",
    )
    serve_parser.add_argument(
        "--extension",
        default="html",
        help="Page template extension (default: html)",
    )
    serve_parser.add_argument(
        "--static",
        action="append",
        default=[],
        metavar="PREFIX=DIR",
        help="Mount a static directory (repeatable)",
    )
    serve_parser.add_argument(
        "--no-notify",
        dest="notify",
        action="store_false",
        help="Skip the desktop notification",
    )
    serve_parser.add_argument("--debug", action="store_true", help="Show error details")

    # -- burrow run --------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start a configured DevServer")
    run_parser.add_argument(
        "server",
        help="Import string (e.g. devserver:server)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "serve":
        from burrow.cli._serve import serve_directory

        serve_directory(args)
    elif args.command == "run":
        from burrow.cli._run import run_server

        run_server(args)

