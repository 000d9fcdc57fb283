"""Dispatch decisions — what a matched rule asks the executor to run.

A route target is classified into exactly one variant, first hit wins:

1. ``dispatcher`` option naming a ``Dispatch`` subclass   -> that class
2. target that is itself a ``Dispatch`` subclass           -> that class
3. plain callable (function, lambda, bound method)         -> ``CallbackDispatch``
4. ``(class, method)`` pair                                -> ``ArrayCallbackDispatch``
5. string with ``@`` or ``::``, or a bare namespaced path -> ``MethodDispatch``
6. any other string, ``module/controller/action``          -> ``ControllerDispatch``

String targets get the ``prefix`` option prepended and ``<name>``,
``{name}`` and ``:name`` placeholders replaced by captured values before
classification. A namespace separator marks a class path only in a
target declared without ``/`` or ``|`` (``app.controllers.Blog``), so
dotted controller segments and captured values such as ``v1.2`` stay on
the controller convention. Classification never fails: unrecognized
strings fall through to the controller convention and the executor
reports missing targets.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

from pathrule._internal.types import Options, RouteTarget
from pathrule.http.request import Request

if TYPE_CHECKING:
    from pathrule.routing.rule import Rule


class DispatchKind(Enum):
    """Tag carried by every dispatch decision."""

    DISPATCHER = "dispatcher"
    CLOSURE = "closure"
    ARRAY_CALLBACK = "array_callback"
    CLASS_METHOD = "class_method"
    CONTROLLER = "controller"


@dataclass(frozen=True, slots=True)
class Dispatch:
    """A resolved dispatch decision.

    Subclass this to build a custom dispatcher and name it as a route
    target or as the ``dispatcher`` option; it is then instantiated
    with the same fields for every match.
    """

    request: Request
    rule: Rule
    target: Any
    vars: dict[str, Any]
    options: Mapping[str, Any]

    kind: ClassVar[DispatchKind] = DispatchKind.DISPATCHER


@dataclass(frozen=True, slots=True)
class CallbackDispatch(Dispatch):
    """Call ``target`` directly."""

    kind: ClassVar[DispatchKind] = DispatchKind.CLOSURE


@dataclass(frozen=True, slots=True)
class MethodDispatch(Dispatch):
    """Call ``action`` on ``controller`` (``"Blog@read"``, ``"Blog::read"``).

    ``action`` is ``None`` when the target names only a class.
    """

    controller: Any
    action: str | None

    kind: ClassVar[DispatchKind] = DispatchKind.CLASS_METHOD

    @property
    def callback(self) -> tuple[Any, str | None]:
        return self.controller, self.action


@dataclass(frozen=True, slots=True)
class ArrayCallbackDispatch(MethodDispatch):
    """A ``(class, method)`` pair given as the route target."""

    kind: ClassVar[DispatchKind] = DispatchKind.ARRAY_CALLBACK


@dataclass(frozen=True, slots=True)
class ControllerDispatch(Dispatch):
    """``module/.../controller/action`` resolved by naming convention."""

    path: tuple[str, ...]

    kind: ClassVar[DispatchKind] = DispatchKind.CONTROLLER

    @property
    def action(self) -> str:
        return self.path[-1]

    @property
    def controller(self) -> str | None:
        return self.path[-2] if len(self.path) > 1 else None

    @property
    def module(self) -> tuple[str, ...]:
        return self.path[:-2]


def is_dispatch_type(value: Any) -> bool:
    """True if *value* is a ``Dispatch`` subclass (not an instance)."""
    return isinstance(value, type) and issubclass(value, Dispatch)


def parse_url_path(url: str) -> tuple[str, ...]:
    """Split a ``/``- or ``|``-delimited target into path segments."""
    url = url.replace("|", "/").strip("/")
    return tuple(url.split("/"))


def substitute(route: RouteTarget, groups: Mapping[str, Any], options: Options) -> RouteTarget:
    """Apply the ``prefix`` option and variable placeholders to a string target."""
    if not isinstance(route, str):
        return route
    prefix = options.get("prefix")
    if isinstance(prefix, str):
        route = prefix + route
    for name, value in groups.items():
        if value is None:
            continue
        value = str(value)
        route = (
            route.replace(f"<{name}>", value)
            .replace(f"{{{name}}}", value)
            .replace(f":{name}", value)
        )
    return route


def _is_class_path(route: str, namespace_separator: str) -> bool:
    if not namespace_separator or namespace_separator not in route:
        return False
    return "/" not in route and "|" not in route


def _split_callback(route: str) -> tuple[str, str | None]:
    route = route.replace("::", "@").replace("|", "/").strip("/")
    if "@" not in route:
        return route, None
    controller, _, action = route.rpartition("@")
    return controller, action or None


def resolve_dispatch(
    request: Request,
    rule: Rule,
    route: RouteTarget,
    vars: dict[str, Any],
    options: Options,
    *,
    namespace_separator: str = ".",
    declared: RouteTarget = None,
) -> Dispatch:
    """Classify *route* into one dispatch variant.

    *route* must already have gone through ``substitute()``; *declared*
    is the target with only the ``prefix`` option applied (defaults to
    *route*) and is what the namespace check inspects.
    """
    fields = {"request": request, "rule": rule, "target": route, "vars": vars, "options": options}

    dispatcher = options.get("dispatcher")
    if is_dispatch_type(dispatcher):
        return dispatcher(**fields)

    if is_dispatch_type(route):
        return route(**fields)

    if callable(route) and not isinstance(route, type):
        return CallbackDispatch(**fields)

    if isinstance(route, (tuple, list)):
        controller = route[0] if route else None
        action = route[1] if len(route) > 1 else None
        return ArrayCallbackDispatch(**fields, controller=controller, action=action)

    if isinstance(route, type):
        return MethodDispatch(**fields, controller=route, action=None)

    route = str(route)
    if "@" in route or "::" in route or _is_class_path(
        route if declared is None else str(declared), namespace_separator
    ):
        controller, action = _split_callback(route)
        return MethodDispatch(**fields, controller=controller, action=action)

    return ControllerDispatch(**fields, path=parse_url_path(route))
