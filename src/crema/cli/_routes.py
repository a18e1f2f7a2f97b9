"""``crema routes`` — print the URL map."""

import argparse
import sys

from crema.cli._resolve import resolve_app
from crema.errors import ConfigurationError


def run_routes(args: argparse.Namespace) -> None:
    """Print every URL the app answers, with the action behind each verb."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    try:
        app._ensure_frozen()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    url_map = app.url_map()
    if not url_map:
        print("No routes registered.")
        return
    print(url_map, end="")
