"""``perch routes`` — list registered routes in dispatch order.

Loads and freezes the app behind an import string and prints the route
table. Order matters: it is the order the dispatcher tries routes.
"""

import argparse
import sys

from perch.cli._resolve import load_app
from perch.errors import ConfigurationError
from perch.routing.route import CompiledRoute


def format_routes(routes: tuple[CompiledRoute, ...]) -> str:
    """Render routes as an aligned VERB / TEMPLATE / VARIABLES / HANDLER table."""
    rows: list[tuple[str, str, str, str]] = []
    for route in routes:
        handler_name = getattr(route.handler, "__name__", str(route.handler))
        if route.name:
            handler_name = f"{handler_name} ({route.name})"
        variables = ", ".join(route.variable_names) or "-"
        rows.append((str(route.verb), route.template, variables, handler_name))

    headers = ("VERB", "TEMPLATE", "VARIABLES", "HANDLER")
    widths = [max(len(headers[i]), *(len(r[i]) for r in rows)) for i in range(3)]
    fmt = f"{{:<{widths[0]}}}  {{:<{widths[1]}}}  {{:<{widths[2]}}}  {{}}"

    lines = [fmt.format(*headers)]
    sep_len = sum(widths) + 6 + max(len(r[3]) for r in rows)
    lines.append("-" * min(sep_len, 80))
    lines.extend(fmt.format(*row) for row in rows)
    return "\n".join(lines)


def run_routes(args: argparse.Namespace) -> None:
    """List registered routes for a perch app."""
    try:
        app = load_app(args.app)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    routes = app.registry.routes
    if not routes:
        print("No routes registered.")
        return

    print(format_routes(routes))
