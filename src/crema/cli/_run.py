"""``crema run`` — serve an app with a server adapter."""

import argparse
import logging
import sys

from crema.cli._resolve import resolve_app
from crema.errors import ConfigurationError
from crema.server.adapters import get_adapter


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and serve it.

    The server adapter is checked before the app is frozen or any
    socket is bound; an unknown name exits with status 1.
    """
    if args.log_level:
        logging.basicConfig(
            level=args.log_level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    server = args.server or app.config.server
    try:
        get_adapter(server)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    try:
        app.run(host=args.host, port=args.port, server=server, log_level=args.log_level)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
