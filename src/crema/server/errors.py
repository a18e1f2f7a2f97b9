"""Error handling pipeline for crema requests.

Maps HTTPError exceptions and unexpected failures raised by actions or
middleware to ``text/plain`` responses.
"""

import logging
import traceback

from crema.errors import HTTPError
from crema.http.request import Request
from crema.http.response import Response, plain_text

logger = logging.getLogger("crema.server")


def handle_http_error(exc: HTTPError, request: Request) -> Response:
    """Map an HTTPError to a Response carrying its status and headers."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.url, exc.detail)
    return plain_text(exc.detail or f"Error {exc.status}", exc.status, exc.headers)


def handle_internal_error(exc: Exception, request: Request, *, debug: bool) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.url)
    if debug:
        body = "".join(traceback.format_exception(exc))
        return plain_text(body, 500)
    return plain_text("Internal Server Error", 500)
