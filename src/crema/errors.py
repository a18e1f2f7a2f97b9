"""Crema exception hierarchy.

Shared across the route compiler, App, dispatch pipeline, and middleware
so every module raises and catches the same types.

Resolution outcomes (no route, wrong verb) are never raised by the
resolver itself; the pipeline renders them as plain responses.  The
``NotFound`` and ``MethodNotImplemented`` exceptions exist so actions
and middleware can produce the same responses by raising.
"""

from dataclasses import dataclass


class CremaError(Exception):
    """Base for all crema-specific errors."""


class ConfigurationError(CremaError):
    """Raised when app configuration is invalid.

    Typically raised while mounting controllers or starting the server,
    before any request is served.
    """


class RouteConflict(ConfigurationError):  # noqa: N818
    """Two different actions claim the same (pattern, verb) pair."""

    def __init__(self, source: str, verb: str, existing: str, incoming: str) -> None:
        self.source = source
        self.verb = verb
        self.existing = existing
        self.incoming = incoming
        super().__init__(
            f"{verb} {source or '/'!r} is already bound to {existing}; "
            f"refusing to rebind it to {incoming}"
        )


class UnknownServerAdapter(ConfigurationError):
    """The requested server adapter name is not registered."""

    def __init__(self, name: str, available: tuple[str, ...]) -> None:
        self.name = name
        self.available = available
        super().__init__(
            f"Unknown server adapter {name!r}. Available: {', '.join(available)}"
        )


@dataclass(frozen=True, slots=True)
class HTTPError(CremaError):
    """An error that maps directly to an HTTP status code.

    Raised by actions or middleware.  The dispatch pipeline catches these
    and turns them into a ``text/plain`` response.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — nothing serves the request path.

    Carries ``X-Cascade: pass`` so an outer handler may still serve it.
    """

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail, headers=(("X-Cascade", "pass"),))


class MethodNotImplemented(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """501 — the resource exists but is not served for this HTTP verb.

    Includes an ``Allow`` header listing the verbs that are bound.
    """

    def __init__(self, allowed: tuple[str, ...], detail: str = "") -> None:
        allow_value = ", ".join(allowed)
        default_detail = (
            f"Resource found but it can be accessed only through {allow_value}"
        )
        super().__init__(
            status=501,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )
