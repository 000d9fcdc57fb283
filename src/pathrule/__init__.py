"""Pathrule — a URL routing rule engine.

Declares route rules as path templates with typed variables, admits
requests by method, domain, scheme, content negotiation, extension and
parameter filters, and resolves each match to a dispatch decision.

Basic usage::

    from pathrule import Request, Router

    router = Router()
    router.get("user/<id>", "Index@read").pattern(id="int")
    router.rule("blog/<name?>", "blog/index/read")

    dispatch = router.match(Request.create("GET", "/user/42"))
    dispatch.controller, dispatch.action  # ("Index", "read")
    dispatch.vars                         # {"id": 42}
"""

__version__ = "0.1.0"
__all__ = [
    "ArrayCallbackDispatch",
    "CallbackDispatch",
    "ConfigurationError",
    "ControllerDispatch",
    "Dispatch",
    "DispatchKind",
    "HTTPError",
    "MethodDispatch",
    "MethodNotAllowed",
    "NotFound",
    "PathruleError",
    "Request",
    "Router",
    "RouterConfig",
    "Rule",
    "RuleGroup",
]

_DISPATCH_NAMES = (
    "ArrayCallbackDispatch",
    "CallbackDispatch",
    "ControllerDispatch",
    "Dispatch",
    "DispatchKind",
    "MethodDispatch",
)

_ERROR_NAMES = ("ConfigurationError", "HTTPError", "MethodNotAllowed", "NotFound", "PathruleError")


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import pathrule`` fast while providing a clean top-level API.
    """
    if name == "Router":
        from pathrule.routing.router import Router

        return Router

    if name in ("Rule", "RuleGroup"):
        from pathrule.routing import rule as _rule

        return getattr(_rule, name)

    if name == "RouterConfig":
        from pathrule.config import RouterConfig

        return RouterConfig

    if name == "Request":
        from pathrule.http.request import Request

        return Request

    if name in _DISPATCH_NAMES:
        from pathrule.routing import dispatch as _dispatch

        return getattr(_dispatch, name)

    if name in _ERROR_NAMES:
        from pathrule import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
