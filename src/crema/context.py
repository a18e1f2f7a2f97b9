"""Request-scoped context via ContextVar.

Provides ``request_var``: the request currently being dispatched.  It is
set by the handler pipeline and reset after each request, so rewriters,
which only receive path captures, can still reach the request::

    def legacy_post(slug):
        request = get_request()
        return Redirect(f"/posts/{slug}?{request.query_string.decode()}", 301)

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local under
    free-threading. No locks needed.
"""

from contextvars import ContextVar

from crema.http.request import Request

request_var: ContextVar[Request] = ContextVar("crema_request")
"""The current request. Set by the ASGI handler before dispatch."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()
