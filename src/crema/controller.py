"""Controllers — classes whose public methods are routable actions.

A controller declares its URL, middleware, and formats as class attributes.
Mounting turns those declarations into a mutable ``ControllerConfig`` that
setup functions adjust before the routes are compiled::

    class Articles(Controller):
        url = "/articles"
        formats = (".json",)

        def index(self):
            return "all articles"

        def get_read(self, article_id):
            return f"article {article_id}"

        def post_create(self):
            return ("created", 201)

Each request gets a fresh instance bound to the single resolved action.
"""

from __future__ import annotations

import inspect
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

from crema._internal.invoke import invoke
from crema.errors import NotFound
from crema.http.response import Redirect, Response
from crema.routing.pattern import normalize_formats
from crema.server.negotiation import negotiate

if TYPE_CHECKING:
    from crema.app import App
    from crema.http.request import Request
    from crema.middleware.protocol import Middleware
    from crema.routing.table import RouteTable


def normalize_url(url: str) -> str:
    """``"blog/"`` -> ``"/blog"``; ``"/"`` and ``""`` -> ``""`` (the root)."""
    url = url.strip()
    if not url or url == "/":
        return ""
    return "/" + url.strip("/")


def default_url(cls: type) -> str:
    """Base URL derived from the class name: ``BlogPosts`` -> ``/blog_posts``."""
    snake = re.sub(r"(?<=[a-z0-9])([A-Z])|(?<=[A-Z])([A-Z])(?=[a-z])", r"_\1\2", cls.__name__)
    return "/" + snake.lower()


@dataclass(frozen=True, slots=True)
class MiddlewareSpec:
    """A middleware declaration: a wrapper plus constructor arguments.

    Plain middleware functions are used as-is.  Classes, or any wrapper
    given arguments, are called once at mount time to build the instance.
    """

    wrapper: Callable[..., Any]
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)

    def build(self) -> Middleware:
        if self.args or self.kwargs or isinstance(self.wrapper, type):
            return self.wrapper(*self.args, **self.kwargs)
        return self.wrapper


def _as_spec(entry: Any) -> MiddlewareSpec:
    return entry if isinstance(entry, MiddlewareSpec) else MiddlewareSpec(entry)


@dataclass(slots=True)
class ControllerConfig:
    """Mutable, per-mount view of a controller's routing declarations.

    Setup functions receive this object and apply declarative changes::

        def api_setup(config: ControllerConfig) -> None:
            config.use(RateLimiter, 5, window=60.0)
            config.format(".json")

        app.mount(Articles, "/v1", setup=api_setup)
    """

    controller: type[Controller]
    url: str
    canonicals: list[str] = field(default_factory=list)
    middleware: list[MiddlewareSpec] = field(default_factory=list)
    formats: tuple[str, ...] = ()
    action_formats: dict[str, tuple[str, ...]] = field(default_factory=dict)
    aliases: dict[str, list[str]] = field(default_factory=dict)
    rewrites: list[tuple[str, Callable[..., Any]]] = field(default_factory=list)

    @classmethod
    def from_controller(cls, controller: type[Controller]) -> ControllerConfig:
        url = controller.url if controller.url is not None else default_url(controller)
        return cls(
            controller=controller,
            url=normalize_url(url),
            middleware=[_as_spec(m) for m in controller.middleware],
            formats=normalize_formats(controller.formats),
        )

    # -- URL --

    def map(self, url: str, *canonicals: str) -> None:
        """Replace the base URL (and canonical aliases) outright."""
        self.url = normalize_url(url)
        self.canonicals = [normalize_url(c) for c in canonicals]

    def remap(self, base: str, *canonicals: str) -> None:
        """Rebase every pattern under *base*.

        Each extra root in *canonicals* serves the same actions under
        ``<root><url>`` as well.
        """
        own = self.url
        self.url = normalize_url(base) + own
        self.canonicals = [
            normalize_url(root) + own for root in canonicals
        ] + [normalize_url(base) + c for c in self.canonicals]

    def alias(self, action: str, *paths: str) -> None:
        """Serve *action* at *paths* (relative to the base URL) instead of its name."""
        self.aliases[action] = [p.strip("/") for p in paths]

    # -- Formats --

    def format(self, *formats: str) -> None:
        """Accept ``.json``-style suffixes on every action."""
        self.formats = normalize_formats(formats)

    def format_for(self, action: str, *formats: str) -> None:
        """Accept ``.json``-style suffixes on one action."""
        self.action_formats[action] = normalize_formats(formats)

    # -- Middleware --

    def use(self, wrapper: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        """Append a middleware; the first one added runs outermost."""
        self.middleware.append(MiddlewareSpec(wrapper, args, kwargs))

    # -- Rewriters --

    def rewrite(self, template: str, rewriter: Callable[..., Any]) -> None:
        """Answer *template* (relative to the base URL) with *rewriter*.

        The rewriter receives the template's captures positionally and its
        return value becomes the whole response.
        """
        self.rewrites.append((template, rewriter))

    # -- Compilation --

    def routes(self, *, replace: bool = False) -> RouteTable:
        """Compile this controller's route table."""
        from crema.routing.compiler import compile_routes

        return compile_routes(self, replace=replace)

    def mount(self, app: App) -> RouteTable:
        """Compile the route table for *app*, honoring its conflict policy."""
        return self.routes(replace=app.config.route_conflicts == "replace")


class Controller:
    """Base class for controllers.

    Class attributes:
        url: Base URL. Defaults to the snake-cased class name.
        middleware: Middleware callables or ``MiddlewareSpec`` entries,
            outermost first.
        formats: Format suffixes accepted by every action.
    """

    url: ClassVar[str | None] = None
    middleware: ClassVar[tuple[Any, ...]] = ()
    formats: ClassVar[tuple[str, ...]] = ()

    def __init__(self, action: str) -> None:
        self.action = action
        self.request: Request | None = None

    @classmethod
    def configure(cls) -> ControllerConfig:
        """Build a fresh ``ControllerConfig`` from the class declarations."""
        return ControllerConfig.from_controller(cls)

    @property
    def format(self) -> str | None:
        """Format token of the current request (``"json"`` for ``/a.json``)."""
        return self.request.format if self.request is not None else None

    def redirect(self, url: str, status: int = 302) -> Redirect:
        return Redirect(url, status=status)

    async def __call__(self, request: Request) -> Response:
        """Run the bound action with path segments as positional arguments."""
        self.request = request
        handler = getattr(self, self.action)
        args = request.path_args
        try:
            inspect.signature(handler).bind(*args)
        except TypeError:
            raise NotFound(f"Not Found: {request.script_name}{request.path}") from None
        result = await invoke(handler, *args)
        return negotiate(result)
