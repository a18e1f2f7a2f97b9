"""Immutable HTTP request.

Frozen metadata with async body access.  Dispatch never mutates a
request: it derives an adjusted copy with ``rebase()`` carrying the
script name, path info and format of the resolved action.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from crema._internal.asgi import Receive, Scope


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``script_name`` is the part of the URL that selected the action and
    ``path`` is the rest (the action's path info).  Before dispatch,
    ``script_name`` is the ASGI ``root_path`` and ``path`` the full path.
    ``clean_path`` is ``path`` minus a recognized format suffix, and
    ``format`` that suffix (``"json"`` for ``/feed.json``).
    """

    method: str
    path: str
    script_name: str
    headers: Mapping[str, str]
    query_string: bytes
    http_version: str
    client: tuple[str, int] | None

    # Private: ASGI receive callable for body streaming
    _receive: Receive

    format: str | None = None
    clean_path: str | None = None

    # Private: mutable cache for the body
    # (dict contents are mutable even though the field reference is frozen)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Full request URL (script name + path + query string)."""
        full = f"{self.script_name}{self.path}"
        if self.query_string:
            return f"{full}?{self.query_string.decode('latin-1')}"
        return full

    @property
    def path_args(self) -> tuple[str, ...]:
        """Non-empty segments of the format-stripped path info."""
        path = self.path if self.clean_path is None else self.clean_path
        return tuple(part for part in path.split("/") if part)

    # -- Derivation --

    def rebase(
        self,
        script_name: str,
        path_info: str,
        *,
        clean_path: str | None = None,
        format: str | None = None,  # noqa: A002 — mirrors the field name
    ) -> Request:
        """Return a copy addressed to a resolved action.

        The body cache is shared so a body read by outer middleware is
        not lost.
        """
        return replace(
            self,
            script_name=script_name,
            path=path_info,
            clean_path=path_info if clean_path is None else clean_path,
            format=format,
            _cache=self._cache,
        )

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached — the ASGI receive is consumed once, then
        the same bytes are returned on subsequent calls.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        """Parse the body as JSON."""
        import json as json_module

        raw = await self.body()
        return json_module.loads(raw)

    async def text(self) -> str:
        """Read the body as text (UTF-8)."""
        raw = await self.body()
        return raw.decode("utf-8")

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        headers = {
            name.decode("latin-1").lower(): value.decode("latin-1")
            for name, value in reversed(scope.get("headers", ()))
        }
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            script_name=scope.get("root_path", ""),
            headers=headers,
            query_string=scope.get("query_string", b""),
            http_version=scope.get("http_version", "1.1"),
            client=tuple(client) if client else None,
            _receive=receive,
        )
