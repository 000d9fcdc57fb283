"""Router — an ordered rule table with a fallback chain.

Rules are declared during setup and compiled (snapshotted and frozen)
when the router compiles, either explicitly or on its first match.
"""

import dataclasses
import logging
from collections.abc import Callable, Mapping
from typing import Any

from pathrule._internal.types import RouteTarget
from pathrule.config import RouterConfig
from pathrule.errors import ConfigurationError, MethodNotAllowed, NotFound
from pathrule.http.request import Request
from pathrule.routing.dispatch import Dispatch
from pathrule.routing.rule import Rule, RuleGroup

logger = logging.getLogger("pathrule.routing")


class Router:
    """Ordered rule table. The first rule to admit a request wins.

    Usage::

        router = Router()
        router.get("user/<id>", "Index@read").pattern(id="int")
        router.group("blog", lambda g: g.rule("<slug>", "blog/show"))
        router.compile()
        dispatch = router.match(Request.create("GET", "/user/42"))
        dispatch.vars  # {"id": 42}
    """

    __slots__ = ("_compiled", "_cross_domain", "_root", "config")

    def __init__(self, config: RouterConfig | None = None) -> None:
        self.config: RouterConfig = config or RouterConfig()
        self._root = RuleGroup(self)
        self._compiled = False
        self._cross_domain: list[Rule] = []

    def config_value(self, name: str) -> Any:
        """Look up a configuration value by name."""
        try:
            return getattr(self.config, name)
        except AttributeError:
            msg = f"Unknown router config {name!r}"
            raise ConfigurationError(msg) from None

    # -- Declaration --

    def _ensure_open(self) -> None:
        if self._compiled:
            msg = "Cannot add rules after compilation."
            raise RuntimeError(msg)

    def rule(
        self,
        rule: str,
        route: RouteTarget,
        method: str = "*",
        *,
        name: str | None = None,
        options: Mapping[str, Any] | None = None,
        pattern: Mapping[str, str] | None = None,
    ) -> Rule:
        """Declare a rule at the top level. Must be called before compile()."""
        self._ensure_open()
        return self._root.rule(rule, route, method, name=name, options=options, pattern=pattern)

    def any(self, rule: str, route: RouteTarget, **kwargs: Any) -> Rule:
        return self.rule(rule, route, "*", **kwargs)

    def get(self, rule: str, route: RouteTarget, **kwargs: Any) -> Rule:
        return self.rule(rule, route, "get", **kwargs)

    def post(self, rule: str, route: RouteTarget, **kwargs: Any) -> Rule:
        return self.rule(rule, route, "post", **kwargs)

    def put(self, rule: str, route: RouteTarget, **kwargs: Any) -> Rule:
        return self.rule(rule, route, "put", **kwargs)

    def patch(self, rule: str, route: RouteTarget, **kwargs: Any) -> Rule:
        return self.rule(rule, route, "patch", **kwargs)

    def delete(self, rule: str, route: RouteTarget, **kwargs: Any) -> Rule:
        return self.rule(rule, route, "delete", **kwargs)

    def group(
        self,
        rule: str = "",
        callback: Callable[[RuleGroup], Any] | None = None,
        **kwargs: Any,
    ) -> RuleGroup:
        """Declare a top-level group; *callback* receives it to declare children."""
        self._ensure_open()
        return self._root.group(rule, callback, **kwargs)

    def add_cross_domain_rule(self, rule: Rule) -> None:
        """Register *rule* to be tried on any domain after the domain rules."""
        self._ensure_open()
        if rule not in self._cross_domain:
            self._cross_domain.append(rule)

    # -- Introspection --

    @property
    def root(self) -> RuleGroup:
        return self._root

    @property
    def routes(self) -> list[Rule]:
        """Return every declared rule in declaration order."""
        return list(self._root.iter_rules())

    def find(self, name: str) -> Rule | None:
        """Return the first rule declared with *name*, if any."""
        for item in self._root.iter_rules():
            if item.name == name:
                return item
        return None

    # -- Matching --

    def compile(self) -> None:
        """Compile every rule and freeze the router. No more rules can be added."""
        self._root.compile()
        self._compiled = True
        logger.debug("compiled %d rules", len(self.routes))

    def url_for(self, request: Request) -> str:
        """The URL rules match against: the path without its leading slash."""
        url = request.path.lstrip("/")
        if self.config.path_delimiter != "/":
            url = url.replace("/", self.config.path_delimiter)
        return url

    def match(self, request: Request) -> Dispatch:
        """Match a request against the rules, in declaration order.

        Returns the first rule's dispatch decision.
        Raises ``NotFound`` if no rule admits the request.
        Raises ``MethodNotAllowed`` if some rule's pattern matches the
        path but only for other methods.
        """
        if not self._compiled:
            self.compile()

        if request.root_domain is None and self.config.root_domain:
            request = dataclasses.replace(request, root_domain=self.config.root_domain)

        url = self.url_for(request)
        dispatch = self._root.check(request, url)
        if dispatch is not None:
            return dispatch

        for item in self._cross_domain:
            dispatch = item.check(request, url, any_domain=True)
            if dispatch is not None:
                logger.debug("cross-domain rule %r matched %s", item.rule, request.host)
                return dispatch

        allowed = self._allowed_methods(url)
        if allowed and request.method.lower() not in allowed:
            raise MethodNotAllowed(frozenset(allowed))

        raise NotFound(f"No rule matches {request.method} {request.path!r}")

    def _allowed_methods(self, url: str) -> set[str]:
        """Methods of the rules whose pattern matches *url* (empty if any allows all)."""
        allowed: set[str] = set()
        for item in self._root.iter_rules():
            if item.match_path(url) is None:
                continue
            method = item.get_option("method")
            if not method or not isinstance(method, str):
                return set()
            allowed.update(m for m in method.lower().split("|") if m)
        return allowed
