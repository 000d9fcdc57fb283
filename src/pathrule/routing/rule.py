"""Rules and rule groups.

A ``Rule`` is one declared route: a rule string such as ``user/<id>``, a
route target, an HTTP method filter and options. A ``RuleGroup`` is an
ancestor node contributing a rule prefix, options, variable patterns and
a domain to the rules declared inside it.

Lifecycle::

    rule = router.rule("user/<id>", "Index@read").pattern(id="int")
    # ... more configuration ...
    dispatch = rule.check(request, "user/42")   # compiles on first call

Compiling snapshots the effective options and patterns (the rule's own
laid over its group chain) and freezes the rule; later configuration
raises ``ConfigurationError``. Checking is then a pure function of the
snapshot and the request: the rule keeps no per-request state, so one
compiled rule may serve concurrent requests.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Self

from pathrule._internal.types import RouteTarget
from pathrule.config import RouterConfig
from pathrule.errors import ConfigurationError
from pathrule.http.request import Request
from pathrule.routing.dispatch import Dispatch, resolve_dispatch, substitute
from pathrule.routing.extract import extract_vars
from pathrule.routing.matcher import admits
from pathrule.routing.options import OptionBuilder, combine_options, combine_patterns
from pathrule.routing.patterns import (
    NAMED_PATTERNS,
    build_rule_regex,
    literal_prefix,
    normalize_rule,
    variable_tokens,
)

if TYPE_CHECKING:
    from pathrule.routing.router import Router

logger = logging.getLogger("pathrule.routing")

_DEFAULT_CONFIG = RouterConfig()


class _RuleNode(OptionBuilder):
    """State and option resolution shared by rules and groups."""

    __slots__ = (
        "_compiled",
        "_domain",
        "_extra_merge",
        "_options",
        "_pattern",
        "_snapshot_options",
        "_snapshot_pattern",
        "parent",
        "router",
    )

    def __init__(
        self,
        router: Router | None = None,
        parent: RuleGroup | None = None,
        options: Mapping[str, Any] | None = None,
        pattern: Mapping[str, str] | None = None,
    ) -> None:
        self.router = router
        self.parent = parent
        self._domain: str | None = None
        self._options: dict[str, Any] = dict(options or {})
        self._pattern: dict[str, str] = dict(pattern or {})
        self._extra_merge: list[str] = []
        self._compiled = False
        self._snapshot_options: Mapping[str, Any] | None = None
        self._snapshot_pattern: Mapping[str, str] | None = None

    def _ensure_mutable(self) -> None:
        if self._compiled:
            msg = f"Cannot configure {self!r} after it has been compiled."
            raise ConfigurationError(msg)

    # -- Configuration --

    @property
    def config(self) -> RouterConfig:
        """The owning router's config (defaults when detached)."""
        if self.router is None:
            return _DEFAULT_CONFIG
        return self.router.config

    def config_value(self, name: str) -> Any:
        if self.router is not None:
            return self.router.config_value(name)
        try:
            return getattr(_DEFAULT_CONFIG, name)
        except AttributeError:
            msg = f"Unknown router config {name!r}"
            raise ConfigurationError(msg) from None

    @property
    def merge_option_names(self) -> tuple[str, ...]:
        return (*self.config.merge_options, *self._extra_merge)

    # -- Domain --

    @property
    def domain(self) -> str:
        """Own domain, else the nearest ancestor's, else ``""``."""
        if self._domain:
            return self._domain
        if self.parent is not None:
            return self.parent.domain
        return ""

    def set_domain(self, domain: str) -> Self:
        self._ensure_mutable()
        self._domain = domain
        self._options["domain"] = domain
        return self

    # -- Options and patterns --

    @property
    def options(self) -> dict[str, Any]:
        """This node's own options (a copy)."""
        return dict(self._options)

    @property
    def own_pattern(self) -> dict[str, str]:
        return dict(self._pattern)

    def effective_options(self) -> dict[str, Any]:
        """Own options laid over the ancestor chain's, merge-eligible names combined."""
        if self._snapshot_options is not None:
            return dict(self._snapshot_options)
        if self.parent is None:
            return dict(self._options)
        return combine_options(
            self.parent.effective_options(),
            self._options,
            self.merge_option_names,
        )

    def effective_pattern(self) -> dict[str, str]:
        """Own variable patterns laid over the ancestor chain's."""
        if self._snapshot_pattern is not None:
            return dict(self._snapshot_pattern)
        if self.parent is None:
            return dict(self._pattern)
        return combine_patterns(self.parent.effective_pattern(), self._pattern)

    def get_option(self, name: str, default: Any = None) -> Any:
        return self.effective_options().get(name, default)

    def get_pattern(self, name: str) -> str | None:
        return self.effective_pattern().get(name)

    def _freeze(self) -> None:
        self._snapshot_options = MappingProxyType(self.effective_options())
        self._snapshot_pattern = MappingProxyType(self.effective_pattern())
        self._compiled = True

    @property
    def compiled(self) -> bool:
        return self._compiled


class Rule(_RuleNode):
    """A single declared route pattern plus its target and options.

    Args:
        router: Owning router (supplies config); may be ``None``.
        parent: Enclosing group; its rule prefix is prepended.
        name: Optional identifier for lookups.
        rule: Rule string, e.g. ``"blog/<year>/<slug?>"``. A trailing
            ``$`` turns on complete matching.
        route: Route target (callable, ``(class, method)`` pair,
            ``Dispatch`` subclass, ``"Class@method"`` or
            ``"module/controller/action"`` string).
        method: ``"*"`` for any, or ``"get"``, ``"get|post"``, ...
    """

    __slots__ = ("_method", "_name", "_named_patterns", "_regex_cache", "_route", "_rule")

    def __init__(
        self,
        router: Router | None,
        parent: RuleGroup | None,
        name: str | None,
        rule: str,
        route: RouteTarget,
        method: str = "*",
        options: Mapping[str, Any] | None = None,
        pattern: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(router, parent, options, pattern)
        self._name = name
        self._route = route
        self._method = method or "*"
        self._named_patterns: dict[str, str] = dict(NAMED_PATTERNS)
        self._regex_cache: dict[tuple[bool, bool], re.Pattern[str]] = {}
        self._rule = self._normalize(rule)
        if self._method != "*":
            self._options["method"] = self._method.lower()

    def _normalize(self, rule: str) -> str:
        if rule.endswith("$"):
            self._options["complete_match"] = True
            rule = rule[:-1]
        if rule != "/":
            rule = rule.lstrip("/")
        prefix = self.parent.full_rule if self.parent is not None else ""
        if prefix:
            rule = prefix + ("/" + rule.lstrip("/") if rule.strip("/") else "")
        return normalize_rule(rule) or "/"

    # -- Accessors --

    @property
    def name(self) -> str:
        return self._name or ""

    @property
    def rule(self) -> str:
        return self._rule

    @property
    def route(self) -> Any:
        return self._route

    @property
    def method(self) -> str:
        return self._method.lower()

    def set_name(self, name: str) -> Self:
        self._ensure_mutable()
        self._name = name
        return self

    def set_method(self, method: str) -> Self:
        """Restrict to ``method`` (``"get"``, ``"get|post"``); ``"*"`` allows any."""
        self._ensure_mutable()
        self._method = method or "*"
        if self._method == "*":
            self._options.pop("method", None)
        else:
            self._options["method"] = self._method.lower()
        return self

    def regex(self, patterns: Mapping[str, str] | None = None, /, **kwargs: str) -> Self:
        """Add named pattern aliases usable by this rule's variable patterns."""
        self._ensure_mutable()
        self._named_patterns.update(patterns or {}, **kwargs)
        return self

    # -- Compilation --

    def compile(self) -> None:
        """Snapshot effective options/patterns and build the default regex.

        Idempotent. Raises ``ConfigurationError`` if the rule string
        does not produce a valid regex.
        """
        if self._compiled:
            return
        self._freeze()
        options = self._snapshot_options or {}
        complete = self._complete_flag(options, False)
        self._regex(options, complete)

    def _complete_flag(self, options: Mapping[str, Any], complete_match: bool) -> bool:
        if options.get("complete_match") is not None:
            return bool(options["complete_match"])
        return complete_match or self.config.complete_match

    def _remove_slash(self, options: Mapping[str, Any]) -> bool:
        flag = options.get("remove_slash")
        if flag is None:
            return self.config.remove_slash
        return bool(flag)

    def _full_rule(self, options: Mapping[str, Any]) -> str:
        depr = self.config.path_delimiter
        if self._rule == "/":
            return depr
        rule = self._rule
        if self._remove_slash(options):
            rule = rule.rstrip("/")
        return depr + rule.replace("/", depr)

    def _regex(self, options: Mapping[str, Any], complete: bool) -> re.Pattern[str]:
        ignore_case = options.get("case_sensitive") is False
        key = (complete, ignore_case)
        compiled = self._regex_cache.get(key)
        if compiled is not None:
            return compiled

        rule = self._full_rule(options)
        body = build_rule_regex(
            rule,
            variable_tokens(rule, self.config.path_delimiter),
            self._snapshot_pattern or {},
            {**options, "remove_slash": self._remove_slash(options)},
            complete,
            default_pattern=self.config.default_route_pattern,
            named_patterns=self._named_patterns,
            delimiter=self.config.path_delimiter,
        )
        try:
            compiled = re.compile("^" + body, re.IGNORECASE if ignore_case else 0)
        except re.error as exc:
            msg = f"route pattern error in {self._rule!r}: {exc}"
            raise ConfigurationError(msg) from exc
        logger.debug("compiled %r -> %s", self, compiled.pattern)
        self._regex_cache[key] = compiled
        return compiled

    # -- Matching --

    def _suffix_check(self, request: Request | None, url: str, options: Mapping[str, Any]) -> str:
        """Strip a trailing delimiter (``remove_slash``) and the ``.ext`` suffix."""
        if self._remove_slash(options) and self._rule != "/":
            url = url.rstrip(self.config.path_delimiter)
        if request is not None and options.get("ext") is not None and request.ext:
            url = re.sub(rf"\.{re.escape(request.ext)}$", "", url, flags=re.IGNORECASE)
        return url

    def _match_url(
        self,
        url: str,
        options: Mapping[str, Any],
        complete: bool,
    ) -> dict[str, str | None] | None:
        depr = self.config.path_delimiter
        rule = self._full_rule(options)
        url = depr + url

        if rule == depr and url != depr:
            return None

        if "<" not in rule:
            if rule.lower() == url.lower():
                return {}
            if not complete and (url + depr).lower().startswith((rule + depr).lower()):
                return {}
            return None

        prefix = literal_prefix(rule, depr)
        if prefix and not url.lower().startswith(prefix.lower()):
            return None

        match = self._regex(options, complete).match(url)
        if match is None:
            return None
        return match.groupdict()

    def match_path(self, url: str, complete_match: bool = False) -> dict[str, str | None] | None:
        """Match *url* against the rule string alone, ignoring request options.

        Returns the raw named groups, or ``None``.
        """
        self.compile()
        options = self._snapshot_options or {}
        url = self._suffix_check(None, url, options)
        return self._match_url(url, options, self._complete_flag(options, complete_match))

    def check(
        self,
        request: Request,
        url: str,
        complete_match: bool = False,
        *,
        any_domain: bool = False,
    ) -> Dispatch | None:
        """Evaluate *request* against this rule.

        *url* is the request path relative to the router, without a
        leading delimiter (``"user/42"``). Returns the dispatch decision,
        or ``None`` if the rule does not admit or does not match.
        With *any_domain* the ``domain`` option is not checked.
        """
        self.compile()
        options = self._snapshot_options or {}
        if any_domain and "domain" in options:
            options = {k: v for k, v in options.items() if k != "domain"}

        if not admits(options, request, self):
            return None

        url = self._suffix_check(request, url, options)
        groups = self._match_url(url, options, self._complete_flag(options, complete_match))
        if groups is None:
            return None

        return self.parse_rule(request, url, groups, options)

    def parse_rule(
        self,
        request: Request,
        url: str,
        groups: Mapping[str, str | None],
        options: Mapping[str, Any],
    ) -> Dispatch:
        """Turn a successful match into a dispatch decision."""
        delimiter = options.get("param_depr") or self.config.path_delimiter
        route = substitute(self._route, groups, options)
        variables = extract_vars(
            groups,
            rule=self._rule,
            url=url,
            patterns=self._snapshot_pattern or {},
            options=options,
            delimiter=delimiter,
        )
        return resolve_dispatch(
            request,
            self,
            route,
            variables,
            options,
            namespace_separator=self.config.namespace_separator,
            declared=substitute(self._route, {}, options),
        )

    # -- Persistence --

    def __getstate__(self) -> dict[str, Any]:
        return {
            "name": self._name,
            "rule": self._rule,
            "route": self._route,
            "method": self._method,
            "option": dict(self._options),
            "pattern": dict(self._pattern),
        }

    def __setstate__(self, state: Mapping[str, Any]) -> None:
        _RuleNode.__init__(self, None, None, state["option"], state["pattern"])
        self._name = state["name"]
        self._rule = state["rule"]
        self._route = state["route"]
        self._method = state["method"]
        self._named_patterns = dict(NAMED_PATTERNS)
        self._regex_cache = {}

    def cross_domain_rule(self) -> Self:
        """Make this rule valid on every domain.

        The router tries it again, ignoring domains, once no rule matched.
        """
        if self.router is None:
            msg = f"{self!r} is not attached to a router"
            raise ConfigurationError(msg)
        self.router.add_cross_domain_rule(self)
        return self

    def bind(self, router: Router | None, parent: RuleGroup | None = None) -> Self:
        """Re-attach a restored rule to a router and (optionally) a group."""
        self._ensure_mutable()
        self.router = router
        self.parent = parent
        return self

    def __repr__(self) -> str:
        target = getattr(self._route, "__name__", self._route)
        return f"Rule({self._rule!r} -> {target!r} [{self.method}])"


class RuleGroup(_RuleNode):
    """An ancestor node: rule prefix, inherited options, patterns and domain.

    Children are checked in declaration order; the first one to return a
    dispatch decision wins.
    """

    __slots__ = ("_children", "full_rule")

    def __init__(
        self,
        router: Router | None = None,
        parent: RuleGroup | None = None,
        rule: str = "",
        options: Mapping[str, Any] | None = None,
        pattern: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(router, parent, options, pattern)
        rule = normalize_rule(rule.strip("/"))
        prefix = parent.full_rule if parent is not None else ""
        self.full_rule = "/".join(p for p in (prefix, rule) if p)
        self._children: list[Rule | RuleGroup] = []

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
        """Declare a rule inside this group."""
        self._ensure_mutable()
        item = Rule(self.router, self, name, rule, route, method, options, pattern)
        self._children.append(item)
        return item

    def group(
        self,
        rule: str = "",
        callback: Callable[[RuleGroup], Any] | None = None,
        *,
        options: Mapping[str, Any] | None = None,
        pattern: Mapping[str, str] | None = None,
    ) -> RuleGroup:
        """Declare a nested group; *callback* receives it to declare children."""
        self._ensure_mutable()
        child = RuleGroup(self.router, self, rule, options, pattern)
        self._children.append(child)
        if callback is not None:
            callback(child)
        return child

    @property
    def children(self) -> tuple[Rule | RuleGroup, ...]:
        return tuple(self._children)

    def iter_rules(self) -> Iterator[Rule]:
        """Yield every rule in this subtree, in declaration order."""
        for child in self._children:
            if isinstance(child, RuleGroup):
                yield from child.iter_rules()
            else:
                yield child

    def compile(self) -> None:
        """Freeze this group, then compile every child."""
        if not self._compiled:
            self._freeze()
        for child in self._children:
            child.compile()

    def check(self, request: Request, url: str, complete_match: bool = False) -> Dispatch | None:
        for child in self._children:
            dispatch = child.check(request, url, complete_match)
            if dispatch is not None:
                return dispatch
        return None

    def __repr__(self) -> str:
        return f"RuleGroup({self.full_rule!r}, {len(self._children)} children)"
