"""Immutable HTTP request.

Frozen metadata describing what a rule needs to decide admission:
method, path, host, scheme, headers and query parameters. Everything
derived (sub-domain, extension, content-negotiation flags) is computed
from those fields on access, never stored.
"""

from __future__ import annotations

import posixpath
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pathrule.http.headers import Headers
from pathrule.http.query import QueryParams


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request as seen by the rule engine.

    ``path_params`` holds variables already bound for this request (if
    any); ``param()`` consults them before the query string.
    ``root_domain`` overrides the root used to compute ``sub_domain``.
    """

    method: str
    path: str
    host: str = "localhost"
    scheme: str = "http"
    headers: Headers = field(default_factory=Headers)
    query: QueryParams = field(default_factory=QueryParams)
    path_params: Mapping[str, Any] = field(default_factory=dict)
    root_domain: str | None = None

    # -- Host --

    @property
    def host_name(self) -> str:
        """The host without its port, lowercased."""
        host = self.host.lower()
        if host.startswith("["):
            return host.split("]", 1)[0] + "]"
        return host.rsplit(":", 1)[0] if ":" in host else host

    @property
    def sub_domain(self) -> str:
        """The host minus its root domain (``"api"`` for ``api.example.com``)."""
        host = self.host_name
        root = (self.root_domain or "").lower().strip(".")
        if not root:
            labels = host.split(".")
            if len(labels) <= 2:
                return ""
            root = ".".join(labels[-2:])
        if host == root or not host.endswith("." + root):
            return ""
        return host[: -len(root) - 1]

    # -- Scheme --

    @property
    def is_secure(self) -> bool:
        """True for ``https`` requests, including behind a TLS-terminating proxy."""
        if self.scheme.lower() in ("https", "wss"):
            return True
        return (self.headers.get("x-forwarded-proto") or "").lower() == "https"

    # -- Content negotiation --

    @property
    def is_ajax(self) -> bool:
        """True if sent by ``XMLHttpRequest`` (X-Requested-With header)."""
        return (self.headers.get("x-requested-with") or "").lower() == "xmlhttprequest"

    @property
    def is_pjax(self) -> bool:
        """True if the X-PJAX header is present."""
        return "x-pjax" in self.headers

    @property
    def is_json(self) -> bool:
        """True if the client accepts a JSON response."""
        return "json" in (self.headers.get("accept") or "").lower()

    # -- Path --

    @property
    def ext(self) -> str:
        """The path's file extension without the dot (``"html"``), lowercased."""
        return posixpath.splitext(self.path)[1][1:].lower()

    def param(self, name: str, default: Any = None) -> Any:
        """Look up a request parameter: bound path params first, then the query string."""
        if name in self.path_params:
            return self.path_params[name]
        return self.query.get(name, default)

    # -- Factories --

    @classmethod
    def create(
        cls,
        method: str = "GET",
        path: str = "/",
        *,
        host: str = "localhost",
        scheme: str = "http",
        headers: Mapping[str, str] | None = None,
        query: str = "",
        path_params: Mapping[str, Any] | None = None,
        root_domain: str | None = None,
    ) -> Request:
        """Create a Request from plain values (tests, CLI, non-ASGI callers)."""
        return cls(
            method=method.upper(),
            path=path or "/",
            host=host,
            scheme=scheme,
            headers=Headers.from_mapping(headers),
            query=QueryParams(query),
            path_params=dict(path_params or {}),
            root_domain=root_domain,
        )

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any], root_domain: str | None = None) -> Request:
        """Create a Request from an ASGI HTTP scope."""
        headers = Headers(tuple(scope.get("headers", ())))
        host = headers.get("host")
        if host is None:
            server = scope.get("server")
            host = f"{server[0]}:{server[1]}" if server else "localhost"
        return cls(
            method=scope["method"],
            path=scope["path"],
            host=host,
            scheme=scope.get("scheme", "http"),
            headers=headers,
            query=QueryParams(scope.get("query_string", b"")),
            root_domain=root_domain,
        )
