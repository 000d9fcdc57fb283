"""Pathrule exception hierarchy.

Rule declaration raises ``ConfigurationError``; matching a request
raises an ``HTTPError`` subclass only from ``Router.match``, after every
rule has declined. A single rule that does not match returns ``None``.
"""

from dataclasses import dataclass


class PathruleError(Exception):
    """Base for all pathrule-specific errors."""


class ConfigurationError(PathruleError):
    """A rule, group or router is set up incorrectly.

    Raised for rule strings whose synthesized regex does not compile,
    for builder calls on a rule that is already compiled, and for
    unknown configuration names.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(PathruleError):
    """Routing failure expressed as an HTTP status.

    The caller (an ASGI app, a framework adapter, the CLI) turns it into
    a response.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        return f"{self.status}: {self.detail}" if self.detail else str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no rule admitted the request."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(404, detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: some rule matched the path, none of them for this method.

    ``headers`` carries ``Allow`` with the union of the methods those
    rules accept, upper-cased and sorted.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        methods = sorted({m.upper() for m in allowed})
        allow = ", ".join(methods)
        super().__init__(
            405,
            detail or f"Method not allowed. Allowed methods: {allow}",
            (("Allow", allow),),
        )

    @property
    def allowed(self) -> frozenset[str]:
        """The methods named in the ``Allow`` header."""
        allow = dict(self.headers).get("Allow", "")
        return frozenset(m.strip() for m in allow.split(",") if m.strip())
