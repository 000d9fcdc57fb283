"""Request admission — decide whether a rule's options accept a request.

``admits()`` is a pure predicate over the effective option set and the
request. Checks run in a fixed order and stop at the first failure:

1. ``match``      custom predicate, ``False`` rejects
2. ``method``     request method contained in the option (``"get|post"``)
3. ``ajax`` / ``pjax`` / ``json``   content-negotiation flags
4. ``ext`` / ``deny_ext``   path extension lists (skipped for ``/``)
5. ``domain``     full host or sub-domain
6. ``https``      scheme
7. ``filter``     request parameters equal expected values

An option value of the wrong shape disengages its check instead of
raising.
"""

import logging
from collections.abc import Mapping
from typing import Any

from pathrule.http.request import Request

logger = logging.getLogger("pathrule.routing")

_NEGOTIATION_FLAGS: tuple[tuple[str, str], ...] = (
    ("ajax", "is_ajax"),
    ("pjax", "is_pjax"),
    ("json", "is_json"),
)


def _in_list(value: str, allowed: str) -> bool:
    """Case-insensitive membership in a ``|``-delimited list."""
    return f"|{value}|".lower() in f"|{allowed}|".lower()


def check_predicate(options: Mapping[str, Any], request: Request, rule: Any = None) -> bool:
    match = options.get("match")
    if callable(match):
        return match(rule, request) is not False
    return True


def check_method(options: Mapping[str, Any], request: Request) -> bool:
    method = options.get("method")
    if method and isinstance(method, str):
        return request.method.lower() in method.lower()
    return True


def check_negotiation(options: Mapping[str, Any], request: Request) -> bool:
    for name, attr in _NEGOTIATION_FLAGS:
        if options.get(name) is None:
            continue
        if bool(options[name]) != bool(getattr(request, attr)):
            return False
    return True


def check_ext(options: Mapping[str, Any], request: Request) -> bool:
    if request.path == "/":
        return True
    ext = options.get("ext")
    if ext is not None and not _in_list(request.ext, str(ext)):
        return False
    deny_ext = options.get("deny_ext")
    return not (deny_ext is not None and _in_list(request.ext, str(deny_ext)))


def check_domain(options: Mapping[str, Any], request: Request) -> bool:
    domain = options.get("domain")
    if domain is None:
        return True
    return domain in (request.host_name, request.sub_domain)


def check_scheme(options: Mapping[str, Any], request: Request) -> bool:
    https = options.get("https")
    if https is None:
        return True
    return bool(https) == request.is_secure


def check_filter(options: Mapping[str, Any], request: Request) -> bool:
    params = options.get("filter")
    if not isinstance(params, Mapping):
        return True
    for name, expected in params.items():
        if str(request.param(name, "")) != str(expected):
            return False
    return True


def admits(options: Mapping[str, Any], request: Request, rule: Any = None) -> bool:
    """Return True if *request* satisfies every check *options* engages.

    *rule* is handed to the custom ``match`` predicate alongside the
    request. Nothing here mutates the request.
    """
    if not check_predicate(options, request, rule):
        logger.debug("%r rejected %s %s: match predicate", rule, request.method, request.path)
        return False

    for check in (
        check_method,
        check_negotiation,
        check_ext,
        check_domain,
        check_scheme,
        check_filter,
    ):
        if not check(options, request):
            logger.debug(
                "%r rejected %s %s: %s",
                rule,
                request.method,
                request.path,
                check.__name__.removeprefix("check_"),
            )
            return False

    return True
