"""Server adapters — start an ASGI server around a crema App.

Each adapter is a plain function ``runner(app, *, host, port, workers,
log_level, **options)``.  Servers are imported lazily so only the one
selected needs to be installed.  Selecting a name that is not registered
fails before anything binds a socket.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from crema.errors import UnknownServerAdapter

logger = logging.getLogger("crema.server")

type ServerRunner = Callable[..., None]


def run_pounce(
    app: Any,
    *,
    host: str,
    port: int,
    workers: int = 1,
    log_level: str = "info",
    **options: Any,
) -> None:
    """Serve *app* with pounce, the reference server.

    Pounce's ``run()`` takes an import string, but we hold a live App
    object, so ``pounce.Server`` is used directly with the ASGI callable.
    Extra *options* are forwarded to ``pounce.config.ServerConfig``.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=workers,
        log_level=log_level,
        **options,
    )
    Server(config, app).run()


def run_uvicorn(
    app: Any,
    *,
    host: str,
    port: int,
    workers: int = 1,
    log_level: str = "info",
    **options: Any,
) -> None:
    """Serve *app* with uvicorn.

    Uvicorn only spawns workers from an import string; a live App object
    always runs in a single process.
    """
    import uvicorn

    if workers > 1:
        logger.warning("uvicorn serves a live App in one process; ignoring workers=%d", workers)
    uvicorn.run(app, host=host, port=port, log_level=log_level, **options)


SERVER_ADAPTERS: dict[str, ServerRunner] = {
    "pounce": run_pounce,
    "uvicorn": run_uvicorn,
}


def get_adapter(name: str) -> ServerRunner:
    """Return the runner registered as *name*.

    Raises ``UnknownServerAdapter`` for unregistered names; there is no
    fallback to the default server.
    """
    try:
        return SERVER_ADAPTERS[name]
    except KeyError:
        raise UnknownServerAdapter(name, tuple(SERVER_ADAPTERS)) from None
