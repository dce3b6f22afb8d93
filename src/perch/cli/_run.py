"""``perch run`` — start a pounce server for a perch app."""

import argparse
import sys
from dataclasses import replace

from perch.cli._resolve import load_app
from perch.errors import ConfigurationError


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and serve it.

    ``--debug`` forces the single-worker reloading dev server; otherwise
    the app's own ``config.debug`` decides.
    """
    try:
        app = load_app(args.app)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if args.debug and not app.config.debug:
        app.config = replace(app.config, debug=True)

    app.run(host=args.host, port=args.port, app_path=args.app)
