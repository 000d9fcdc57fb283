"""Rule options — declaration builder and ancestor-chain resolution.

Every rule and group owns an open ``{name: value}`` option mapping. The
effective options of a rule are its own options laid over its group's
effective options, nearest wins. A configurable set of option names
(``model``, ``append`` and ``middleware`` by default) are merged instead
of overridden when both sides define them: lists concatenate parent
first, mappings combine with the child's keys winning.

``OptionBuilder`` replaces string-keyed generic setters with one named
method per known option; ``option()`` and ``set_option()`` remain as the
escape hatch for anything else.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any, Self

from pathrule._internal.types import MatchPredicate

# Named middleware entries appended by the shortcut builders
ALLOW_CROSS_DOMAIN = "allow_cross_domain"
FORM_TOKEN_CHECK = "form_token_check"
CHECK_REQUEST_CACHE = "check_request_cache"


def merge_option_value(parent: Any, child: Any) -> Any:
    """Combine a merge-eligible option defined on both a group and a rule."""
    if isinstance(parent, Mapping) and isinstance(child, Mapping):
        merged = dict(parent)
        # Positional (int-keyed) entries append rather than collide
        index = max((k for k in merged if isinstance(k, int)), default=-1) + 1
        for key, value in child.items():
            if isinstance(key, int):
                merged[index] = value
                index += 1
            else:
                merged[key] = value
        return merged
    if isinstance(parent, (list, tuple)) and isinstance(child, (list, tuple)):
        return [*parent, *child]
    if isinstance(parent, Mapping) and isinstance(child, (list, tuple)):
        return [*parent.values(), *child]
    if isinstance(parent, (list, tuple)) and isinstance(child, Mapping):
        return [*parent, *child.values()]
    return child


def combine_options(
    parent: Mapping[str, Any],
    own: Mapping[str, Any],
    merge_names: Iterable[str] = (),
) -> dict[str, Any]:
    """Lay *own* over *parent*, merging the options named in *merge_names*.

    A merge-eligible option present on only one side is taken unmodified.
    """
    combined = {**parent, **own}
    for name in merge_names:
        if name in parent and name in own:
            combined[name] = merge_option_value(parent[name], own[name])
    return combined


def combine_patterns(parent: Mapping[str, str], own: Mapping[str, str]) -> dict[str, str]:
    """Lay a per-variable pattern map over its parent's, child entries winning."""
    return {**parent, **own}


class OptionBuilder:
    """Chainable option setters shared by rules and groups.

    Subclasses provide ``_options`` (a dict) and ``_ensure_mutable()``,
    which raises once the owner has been compiled.
    """

    __slots__ = ()

    _options: dict[str, Any]
    _pattern: dict[str, str]
    _extra_merge: list[str]

    def _ensure_mutable(self) -> None:
        raise NotImplementedError

    # -- Escape hatch --

    def option(self, options: Mapping[str, Any] | None = None, /, **kwargs: Any) -> Self:
        """Merge *options* and keyword options into this owner's option map."""
        self._ensure_mutable()
        self._options.update(options or {}, **kwargs)
        return self

    def set_option(self, name: str, value: Any) -> Self:
        self._ensure_mutable()
        self._options[name] = value
        return self

    # -- Variables --

    def pattern(self, patterns: Mapping[str, str] | None = None, /, **kwargs: str) -> Self:
        """Register per-variable patterns (named aliases or raw regex fragments)."""
        self._ensure_mutable()
        self._pattern.update(patterns or {}, **kwargs)
        return self

    def when(self, name: str | Mapping[str, Any], rule: Any = None) -> Self:
        """Attach request-variable validation rules (stored as ``var_rule``)."""
        self._ensure_mutable()
        if isinstance(name, Mapping):
            self._options["var_rule"] = dict(name)
        else:
            self._options.setdefault("var_rule", {})[name] = rule
        return self

    def defaults(self, values: Mapping[str, Any]) -> Self:
        """Fallback values for variables the URL leaves unbound."""
        return self.set_option("default", dict(values))

    def depr(self, delimiter: str) -> Self:
        """Path segment delimiter for this rule's extra parameters."""
        return self.set_option("param_depr", delimiter)

    # -- Admission --

    def ext(self, ext: str = "") -> Self:
        """Only admit requests whose path extension is in ``ext`` (``"html|htm"``)."""
        return self.set_option("ext", ext)

    def deny_ext(self, ext: str = "") -> Self:
        return self.set_option("deny_ext", ext)

    def https(self, https: bool = True) -> Self:
        return self.set_option("https", https)

    def json(self, json: bool = True) -> Self:
        return self.set_option("json", json)

    def ajax(self, ajax: bool = True) -> Self:
        return self.set_option("ajax", ajax)

    def pjax(self, pjax: bool = True) -> Self:
        return self.set_option("pjax", pjax)

    def filter(self, params: Mapping[str, Any]) -> Self:
        """Only admit requests whose parameters equal these values."""
        self._ensure_mutable()
        self._options["filter"] = dict(params)
        return self

    def predicate(self, match: MatchPredicate) -> Self:
        """Custom admission check; called with ``(rule, request)``, ``False`` rejects."""
        return self.set_option("match", match)

    def case_sensitive(self, case: bool) -> Self:
        return self.set_option("case_sensitive", case)

    def complete_match(self, match: bool = True) -> Self:
        return self.set_option("complete_match", match)

    def remove_slash(self, remove: bool = True) -> Self:
        return self.set_option("remove_slash", remove)

    # -- Dispatch --

    def prefix(self, prefix: str) -> Self:
        """Prepended to string route targets before dispatch."""
        return self.set_option("prefix", prefix)

    def dispatcher(self, dispatcher: type) -> Self:
        """Dispatch class used for every match, whatever the route target."""
        return self.set_option("dispatcher", dispatcher)

    def view(self, params: Mapping[str, Any] | None = None) -> Self:
        return self.set_option("view", dict(params or {}))

    def append(self, params: Mapping[str, Any] | None = None) -> Self:
        """Implicit parameters appended to the dispatch."""
        self._ensure_mutable()
        self._options["append"] = dict(params or {})
        return self

    def model(
        self,
        var: str | Mapping[str, Any] | Callable[..., Any],
        model: Any = None,
        exception: bool = True,
    ) -> Self:
        """Bind route variables to models.

        ``model("User")`` binds ``id``; ``model("name", "User")`` binds
        ``name``; a mapping replaces all bindings; a callable is appended
        as a custom binder.
        """
        self._ensure_mutable()
        if isinstance(var, Mapping):
            self._options["model"] = dict(var)
            return self
        models = self._options.setdefault("model", {})
        if callable(var) and not isinstance(var, str):
            models[len(models)] = var
        elif model is None:
            models["id"] = (var, True)
        else:
            models[var] = (model, exception)
        return self

    def validate(
        self,
        validator: Any,
        scene: str | list[str] = "",
        message: Mapping[str, str] | None = None,
        batch: bool = False,
    ) -> Self:
        return self.set_option("validate", (validator, scene, dict(message or {}), batch))

    # -- Middleware --

    def middleware(self, middleware: Any, *params: Any) -> Self:
        """Add middleware; each entry is stored as ``(middleware, params)``.

        A list passed without params replaces the middleware list as-is.
        """
        self._ensure_mutable()
        if not params and isinstance(middleware, list):
            self._options["middleware"] = list(middleware)
            return self
        items = middleware if isinstance(middleware, (list, tuple)) else [middleware]
        entries = self._options.setdefault("middleware", [])
        for item in items:
            entries.append((item, params))
        return self

    def without_middleware(self, middleware: list[Any] | None = None) -> Self:
        """Skip these middleware (all of them when empty)."""
        return self.set_option("without_middleware", list(middleware or []))

    def auto_middleware(self, auto: bool = True) -> Self:
        return self.set_option("auto_middleware", auto)

    def allow_cross_domain(self, headers: Mapping[str, str] | None = None) -> Self:
        return self.middleware(ALLOW_CROSS_DOMAIN, dict(headers or {}))

    def token(self, token: str = "__token__") -> Self:
        return self.middleware(FORM_TOKEN_CHECK, token)

    def cache(self, cache: Any) -> Self:
        return self.middleware(CHECK_REQUEST_CACHE, cache)

    # -- Inheritance --

    def merge_options(self, *names: str) -> Self:
        """Add option names to the merge-with-parent set."""
        self._ensure_mutable()
        self._extra_merge.extend(n for n in names if n not in self._extra_merge)
        return self
