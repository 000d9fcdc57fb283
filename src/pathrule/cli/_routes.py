"""``pathrule routes`` — list declared rules.

Resolves an import string to a Router, compiles it, and prints every
rule with its method, rule string, target and name.
"""

import argparse
import sys
from typing import Any

from pathrule.cli._resolve import resolve_router


def describe_target(route: Any) -> str:
    """A short printable form of a route target."""
    if isinstance(route, (tuple, list)):
        return "@".join(describe_target(part) for part in route)
    return getattr(route, "__qualname__", None) or getattr(route, "__name__", None) or str(route)


def run_routes(args: argparse.Namespace) -> None:
    """Print a METHOD / RULE / TARGET / NAME table for ``args.router``."""
    try:
        router = resolve_router(args.router)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    router.compile()
    rules = router.routes
    if not rules:
        print("No rules declared.")
        return

    rows: list[tuple[str, str, str, str]] = []
    for item in rules:
        method = item.get_option("method") or "*"
        rows.append((str(method).upper(), item.rule, describe_target(item.route), item.name))

    headers = ("METHOD", "RULE", "TARGET", "NAME")
    widths = [max(len(h), *(len(r[i]) for r in rows)) for i, h in enumerate(headers[:3])]
    fmt = f"{{:<{widths[0]}}}  {{:<{widths[1]}}}  {{:<{widths[2]}}}  {{}}"
    print(fmt.format(*headers).rstrip())
    print("-" * min(sum(widths) + 6 + max(len(r[3]) for r in rows), 80))
    for row in rows:
        print(fmt.format(*row).rstrip())
