"""Pathrule CLI — inspect and exercise a router's rules.

Entry point registered as ``pathrule`` in ``pyproject.toml``::

    [project.scripts]
    pathrule = "pathrule.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``pathrule`` command."""
    parser = argparse.ArgumentParser(
        prog="pathrule",
        description="Pathrule — a URL routing rule engine.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- pathrule routes ---------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List declared rules")
    routes_parser.add_argument(
        "router",
        help="Import string (e.g. myapp.urls:router)",
    )

    # -- pathrule match ----------------------------------------------------
    match_parser = subparsers.add_parser("match", help="Match a request against the rules")
    match_parser.add_argument(
        "router",
        help="Import string (e.g. myapp.urls:router)",
    )
    match_parser.add_argument("method", help="HTTP method (e.g. GET)")
    match_parser.add_argument("path", help="Request path, optionally with ?query")
    match_parser.add_argument("--host", default="localhost", help="Request host")
    match_parser.add_argument(
        "--https",
        action="store_true",
        help="Treat the request as secure",
    )
    match_parser.add_argument(
        "-H",
        "--header",
        action="append",
        default=[],
        metavar="NAME:VALUE",
        help="Request header (repeatable)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from pathrule.cli._routes import run_routes

        run_routes(args)
    elif args.command == "match":
        from pathrule.cli._match import run_match

        run_match(args)
