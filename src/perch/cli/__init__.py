"""Perch CLI — route table inspection and dev server.

Entry point registered as ``perch`` in ``pyproject.toml``::

    [project.scripts]
    perch = "perch.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``perch`` command."""
    parser = argparse.ArgumentParser(
        prog="perch",
        description="Perch — ordered HTTP route dispatch for Python handlers.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- perch routes -----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List routes in dispatch order")
    routes_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    # -- perch run --------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start a pounce server")
    run_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--debug",
        action="store_true",
        help="Single worker with auto-reload",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from perch.cli._routes import run_routes

        run_routes(args)
    elif args.command == "run":
        from perch.cli._run import run_server

        run_server(args)
