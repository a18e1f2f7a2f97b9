"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> Response: ...

No base class required. The framework checks the shape, not the lineage.

The same protocol serves both levels crema wraps: app-wide middleware
(``App.add_middleware``) runs around route resolution, and controller
middleware (``Controller.middleware`` / ``ControllerConfig.use``) runs
around a single resolved action.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from crema.http.request import Request
from crema.http.response import Response

# The next handler in the middleware chain
type Next = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    """Protocol for crema middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def timing(request: Request, next: Next) -> Response:
            start = time.monotonic()
            response = await next(request)
            elapsed = time.monotonic() - start
            return response.with_header("X-Time", f"{elapsed:.3f}")

        # Class middleware
        class RequireFormat:
            def __init__(self, *formats: str) -> None:
                self.formats = formats

            async def __call__(self, request: Request, next: Next) -> Response:
                ...
    """

    async def __call__(self, request: Request, next: Next) -> Response: ...


def chain(handler: Next, middleware: tuple[Middleware, ...]) -> Next:
    """Wrap *handler* so that ``middleware[0]`` runs outermost."""
    for mw in reversed(middleware):
        handler = _link(mw, handler)
    return handler


def _link(mw: Middleware, inner: Next) -> Next:
    async def call(request: Request) -> Response:
        return await mw(request, inner)

    return call
