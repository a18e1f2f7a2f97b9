"""Crema — controller-oriented routing for ASGI apps.

Controllers are classes; their public methods are actions, and action
names become URLs.  A verb prefix (``post_``, ``put_``, ...) restricts
the HTTP method an action answers.

Basic usage::

    from crema import App, Controller

    class Articles(Controller):
        def index(self, *path):
            return "all articles"

        def post_edit(self, id):
            return f"saved {id}"

    app = App()
    app.mount(Articles)
    app.run()

Serving with uvicorn instead of pounce (``pip install crema[uvicorn]``)::

    app = App(AppConfig(server="uvicorn"))
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "Controller",
    "ControllerConfig",
    "ControllerRegistry",
    "CremaError",
    "HTTPError",
    "MethodNotImplemented",
    "Middleware",
    "Next",
    "NotFound",
    "Redirect",
    "Request",
    "Response",
    "RouteConflict",
    "UnknownServerAdapter",
    "get_request",
    "register",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import crema`` fast while providing a clean top-level API.
    """
    if name == "App":
        from crema.app import App

        return App

    if name == "AppConfig":
        from crema.config import AppConfig

        return AppConfig

    if name in ("Controller", "ControllerConfig"):
        from crema import controller as _ctrl

        return getattr(_ctrl, name)

    if name in ("ControllerRegistry", "register"):
        from crema import registry as _reg

        return getattr(_reg, name)

    if name == "Request":
        from crema.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from crema.http import response as _resp

        return getattr(_resp, name)

    if name in ("Middleware", "Next"):
        from crema.middleware import protocol as _mw

        return getattr(_mw, name)

    if name == "get_request":
        from crema.context import get_request

        return get_request

    if name in (
        "ConfigurationError",
        "CremaError",
        "HTTPError",
        "MethodNotImplemented",
        "NotFound",
        "RouteConflict",
        "UnknownServerAdapter",
    ):
        from crema import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
