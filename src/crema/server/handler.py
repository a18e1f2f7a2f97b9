"""ASGI handler — translates ASGI scope/messages to crema types.

The only component that touches raw ASGI directly. Converts scope dicts
to Request objects, resolves them against the sorted route table, runs
the matched action inside its controller's middleware, and sends the
Response back through ASGI send().
"""

from collections.abc import Callable, Sequence
from contextvars import Token
from typing import Any

from crema._internal.asgi import Receive, Scope, Send
from crema._internal.invoke import invoke
from crema.context import request_var
from crema.errors import HTTPError, MethodNotImplemented, NotFound
from crema.http.request import Request
from crema.http.response import Response
from crema.middleware.protocol import chain
from crema.routing.resolver import (
    Matched,
    Rewritten,
    Unmatched,
    VerbNotBound,
    normalize_path_info,
    resolve,
    split_format,
)
from crema.routing.table import ActionRef, RouteEntry
from crema.server.errors import handle_http_error, handle_internal_error
from crema.server.negotiation import negotiate
from crema.server.sender import send_response


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    routes: Sequence[RouteEntry],
    middleware: tuple[Callable[..., Any], ...],
    debug: bool,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    # Set request context var (reset after dispatch)
    token: Token[Request] = request_var.set(request)

    try:
        async def dispatch(req: Request) -> Response:
            return await dispatch_request(req, routes)

        # App-wide middleware wraps resolution itself
        handler = chain(dispatch, middleware)
        response = await handler(request)

    except HTTPError as exc:
        response = handle_http_error(exc, request)
    except Exception as exc:
        response = handle_internal_error(exc, request, debug=debug)
    finally:
        request_var.reset(token)

    await send_response(response, send, method=request.method)


async def dispatch_request(request: Request, routes: Sequence[RouteEntry]) -> Response:
    """Resolve *request* and produce its response.

    Resolution outcomes are rendered as ordinary responses: a path with
    no pattern is a cascade-eligible 404, a known path with an unbound
    verb is a 501 listing the bound verbs.
    """
    match resolve(routes, request.method, request.path):
        case Matched(ref=ref, path_info=path_info):
            return await run_action(ref, request, path_info)
        case Rewritten(ref=ref, captures=captures):
            return negotiate(await invoke(ref.rewriter, *captures))
        case VerbNotBound(allowed=allowed):
            return handle_http_error(MethodNotImplemented(allowed), request)
        case Unmatched():
            return handle_http_error(NotFound(f"Not Found: {request.path}"), request)


async def run_action(ref: ActionRef, request: Request, path_info: str) -> Response:
    """Run a resolved action inside its controller's middleware chain.

    Builds an adjusted copy of the request (script name, path info, clean
    path and format), a controller instance scoped to the one action, and
    a per-request chain with the first declared middleware outermost.
    """
    clean_path, fmt = split_format(path_info, ref.format_splitter)
    adjusted = request.rebase(
        ref.path,
        normalize_path_info(path_info),
        clean_path=normalize_path_info(clean_path),
        format=fmt,
    )
    controller = ref.controller(ref.action)
    app = chain(controller, ref.middleware)

    token = request_var.set(adjusted)
    try:
        return await app(adjusted)
    finally:
        request_var.reset(token)

