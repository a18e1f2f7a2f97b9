"""Crema CLI — serve an app and inspect its URL map.

Entry point registered as ``crema`` in ``pyproject.toml``::

    [project.scripts]
    crema = "crema.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``crema`` command."""
    parser = argparse.ArgumentParser(
        prog="crema",
        description="Crema — controller-oriented routing for ASGI apps.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- crema run --------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Serve an app")
    run_parser.add_argument(
        "app",
        help="Import string (e.g. myapp:app)",
    )
    run_parser.add_argument(
        "--server",
        default=None,
        help="Server adapter name (default: the app's config, pounce)",
    )
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--log-level",
        default=None,
        choices=("critical", "error", "warning", "info", "debug"),
        help="Logging level for crema and the server",
    )

    # -- crema routes -----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="Print the URL map")
    routes_parser.add_argument(
        "app",
        help="Import string (e.g. myapp:app)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from crema.cli._run import run_server

        run_server(args)
    elif args.command == "routes":
        from crema.cli._routes import run_routes

        run_routes(args)
