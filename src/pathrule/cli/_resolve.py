"""Turn a ``"module:attribute"`` string into a Router.

Used by ``pathrule routes`` and ``pathrule match``.
"""

import importlib
from typing import Any

from pathrule.routing.router import Router

DEFAULT_ATTRIBUTE = "router"


def _load(import_string: str) -> Any:
    module_name, _, attribute = import_string.partition(":")
    module = importlib.import_module(module_name)
    return getattr(module, attribute or DEFAULT_ATTRIBUTE)


def resolve_router(import_string: str) -> Router:
    """Import *import_string* and return the Router it names.

    The attribute defaults to ``router`` when omitted. A callable that is
    not itself a Router is treated as a factory and called with no
    arguments.

    Raises:
        ModuleNotFoundError: The module part cannot be imported.
        AttributeError: The module has no such attribute.
        TypeError: The factory failed, or the result is not a Router.
    """
    obj = _load(import_string)

    if not isinstance(obj, Router) and callable(obj):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Router factory {import_string!r} failed: {exc}"
            raise TypeError(msg) from exc

    if isinstance(obj, Router):
        return obj

    msg = f"{import_string!r} resolved to {type(obj).__name__}, not a pathrule.Router instance"
    raise TypeError(msg)
