"""``pathrule match`` — show how a router resolves one request."""

import argparse
import sys

from pathrule.cli._resolve import resolve_router
from pathrule.cli._routes import describe_target
from pathrule.errors import HTTPError
from pathrule.http.request import Request
from pathrule.routing.dispatch import ControllerDispatch, MethodDispatch


def _parse_headers(values: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for value in values:
        name, sep, content = value.partition(":")
        if not sep:
            print(f"Error: malformed header {value!r} (expected NAME:VALUE)", file=sys.stderr)
            raise SystemExit(2)
        headers[name.strip()] = content.strip()
    return headers


def run_match(args: argparse.Namespace) -> None:
    """Resolve ``args.router`` and print the dispatch decision for the request.

    Exits with status 1 when no rule admits the request.
    """
    try:
        router = resolve_router(args.router)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    path, _, query = args.path.partition("?")
    request = Request.create(
        args.method,
        path,
        host=args.host,
        scheme="https" if args.https else "http",
        headers=_parse_headers(args.header),
        query=query,
    )

    try:
        dispatch = router.match(request)
    except HTTPError as exc:
        print(str(exc), file=sys.stderr)
        raise SystemExit(1) from exc

    print(f"rule:   {dispatch.rule.rule}")
    print(f"kind:   {dispatch.kind.value}")
    if isinstance(dispatch, MethodDispatch):
        print(f"target: {describe_target(dispatch.controller)}@{dispatch.action or ''}")
    elif isinstance(dispatch, ControllerDispatch):
        print(f"target: {'/'.join(dispatch.path)}")
    else:
        print(f"target: {describe_target(dispatch.target)}")
    for name, value in dispatch.vars.items():
        print(f"var:    {name} = {value!r}")
