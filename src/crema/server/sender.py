"""ASGI response sending — translates crema Responses to ASGI messages."""

from crema._internal.asgi import Send
from crema.http.response import Response


def _body_allowed(status: int, method: str) -> bool:
    """Whether a response to *method* with *status* carries a body."""
    # RFC: HEAD, 1xx, 204, and 304 responses do not include a message body.
    if method == "HEAD":
        return False
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(response: Response, send: Send, *, method: str = "GET") -> None:
    """Translate a crema Response into ASGI send() calls.

    The body is emitted chunk by chunk with ``more_body=True`` and closed
    with an empty final message.  ``Content-Length`` still reports the
    full body, including for HEAD, where the body itself is dropped.
    """
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
    ]
    for name, value in response.headers:
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))

    body = response.body_bytes
    if not (100 <= response.status < 200 or response.status in {204, 304}):
        raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))
    else:
        raw_headers.append((b"content-length", b"0"))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    if _body_allowed(response.status, method):
        for chunk in response.chunks():
            await send(
                {
                    "type": "http.response.body",
                    "body": chunk,
                    "more_body": True,
                }
            )
    await send(
        {
            "type": "http.response.body",
            "body": b"",
            "more_body": False,
        }
    )
