"""Crema application class — the mount manager.

Mutable during setup (mounting controllers, global setup, middleware).
Frozen at runtime when app.run() or __call__() is first invoked.
"""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Callable
from types import ModuleType
from typing import Any

from crema._internal.asgi import Receive, Scope, Send
from crema.config import AppConfig
from crema.controller import Controller, ControllerConfig, normalize_url
from crema.middleware.protocol import Middleware
from crema.registry import ControllerRegistry, controllers
from crema.routing.table import RouteEntry, RouteTable
from crema.routing.urlmap import UrlMap
from crema.server.adapters import get_adapter
from crema.server.handler import handle_request

logger = logging.getLogger("crema.app")

# A setup function adjusts a controller's routing declarations before compilation
type Setup = Callable[[ControllerConfig], Any]

# What mount() accepts
type MountTarget = type[Controller] | ModuleType | str | re.Pattern[str]


class App:
    """The crema application.

    Mutable during setup (mounting, global setup, middleware).
    Frozen at runtime when ``app.run()`` or ``__call__()`` is first invoked.

    Usage::

        app = App(AppConfig(base_url="/site"))
        app.global_setup(lambda config: config.format(".json"))
        app.mount(Forum)
        app.mount(Blog, "/news", "/blog")
        app.run()

    Thread safety:
        The setup phase is single-threaded (mounting at import time).
        The freeze transition uses a Lock + double-check so exactly one
        thread sorts the route table, even when several ASGI workers
        call ``__call__()`` concurrently on first request.  After the
        freeze the sorted table is read-only and shared without locks.
    """

    __slots__ = (
        "_automount",
        "_freeze_lock",
        "_frozen",
        "_global_setups",
        # Compiled state (populated by _freeze)
        "_middleware",
        "_middleware_list",
        # Mount registry: controller -> the config it was compiled from
        "_mounted",
        "_registry",
        "_routes",
        "_sorted_routes",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        registry: ControllerRegistry | None = None,
        automount: bool = False,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._registry: ControllerRegistry = registry if registry is not None else controllers
        self._routes: RouteTable = RouteTable()
        self._mounted: dict[type[Controller], ControllerConfig] = {}
        self._global_setups: list[Setup] = []
        self._middleware_list: list[Middleware] = []
        self._automount: bool = automount
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state, set during _freeze()
        self._sorted_routes: tuple[RouteEntry, ...] = ()
        self._middleware: tuple[Middleware, ...] = ()

        if automount:
            self.automount()

    # -- Mounting --

    def mount(
        self,
        target: MountTarget,
        *roots: str,
        setup: Setup | None = None,
    ) -> App:
        """Mount a controller, or every controller a namespace selects.

        *target* may be:

        - a ``Controller`` subclass: itself plus controllers declared
          as its class attributes;
        - a module: every controller class defined in it;
        - a string: registered controllers with that name;
        - a compiled regexp: registered controllers whose qualified
          name it matches.

        The first of *roots* rebases the controllers' URLs (after the
        app's ``base_url``); further roots serve the same actions under
        additional canonical prefixes, taken as given without ``base_url``.
        *setup* receives each controller's ``ControllerConfig`` before
        global setups run.

        Mounting a controller that is already mounted does nothing.
        """
        self._check_not_frozen()
        resolved = self._extract_controllers(target)
        if not resolved:
            logger.warning("mount(%r) selected no controllers", target)
        for controller in resolved:
            self._mount_controller(controller, *roots, setup=setup)
        return self

    def automount(self) -> App:
        """Mount every controller in the registry, each exactly once."""
        self._check_not_frozen()
        for controller in self._registry:
            self._mount_controller(controller)
        return self

    def global_setup(self, func: Setup) -> Setup:
        """Register a setup applied to every controller mounted after this call.

        Controllers mounted earlier are not affected; doing so logs a
        warning so the ordering mistake is visible.  Usable as a
        decorator::

            @app.global_setup
            def everything_speaks_json(config: ControllerConfig) -> None:
                config.format(".json")
        """
        self._check_not_frozen()
        if self._mounted:
            logger.warning(
                "global_setup(%s) registered after %d controller(s) were mounted; "
                "it only applies to controllers mounted from now on",
                getattr(func, "__name__", func),
                len(self._mounted),
            )
        self._global_setups.append(func)
        return func

    @property
    def mounted(self) -> tuple[type[Controller], ...]:
        """Mounted controllers, in mount order."""
        return tuple(self._mounted)

    def controller_config(self, controller: type[Controller]) -> ControllerConfig:
        """The configuration *controller* was compiled from in this app."""
        return self._mounted[controller]

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add an app-wide middleware, wrapping route resolution itself."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Introspection --

    @property
    def routes(self) -> RouteTable:
        """The merged route table."""
        return self._routes

    def url_map(self) -> UrlMap:
        """URLs the app responds to, with the controller#action serving each verb."""
        return UrlMap.from_routes(self._routes.sorted())

    # -- Server --

    def run(
        self,
        host: str | None = None,
        port: int | None = None,
        *,
        server: str | None = None,
        log_level: str | None = None,
        **options: Any,
    ) -> None:
        """Freeze the app and serve it with the selected server adapter.

        The adapter is looked up before anything else, so an unknown
        server name fails immediately with ``UnknownServerAdapter``.
        Extra *options* are forwarded to the server.
        """
        server_name = server or self.config.server
        runner = get_adapter(server_name)
        self._ensure_frozen()

        _host = host or self.config.host
        _port = port or self.config.port
        logger.info(
            "Serving %d route(s) from %d controller(s) with %s on %s:%d",
            len(self._sorted_routes),
            len(self._mounted),
            server_name,
            _host,
            _port,
        )
        runner(
            self,
            host=_host,
            port=_port,
            workers=self.config.workers,
            log_level=log_level or self.config.log_level,
            **options,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles lifespan directly, then delegates HTTP scopes to the
        request handler pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()

        await handle_request(
            scope,
            receive,
            send,
            routes=self._sorted_routes,
            middleware=self._middleware,
            debug=self.config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup so configuration errors surface
        before the server accepts connections.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _mount_controller(
        self,
        controller: type[Controller],
        *roots: str,
        setup: Setup | None = None,
    ) -> None:
        if controller in self._mounted:
            logger.debug("%s is already mounted; skipping", controller.__name__)
            return

        config = controller.configure()
        base_url = normalize_url(self.config.base_url)
        root = roots[0] if roots else None
        if root is not None or base_url:
            config.remap(base_url + normalize_url(root or ""), *roots[1:])

        if setup is not None:
            setup(config)
        for global_setup in self._global_setups:
            global_setup(config)

        table = config.mount(self)

        # Merge into a copy so a conflict leaves the app table untouched
        merged = self._routes.copy()
        merged.merge(table, replace=self.config.route_conflicts == "replace")
        self._routes = merged
        self._mounted[controller] = config
        logger.debug(
            "Mounted %s at %r with %d route(s)",
            controller.__name__,
            config.url or "/",
            len(table),
        )

    def _extract_controllers(self, target: MountTarget) -> list[type[Controller]]:
        if isinstance(target, type) and issubclass(target, Controller):
            nested = [
                value
                for value in vars(target).values()
                if isinstance(value, type) and issubclass(value, Controller)
            ]
            return [target, *nested]

        if isinstance(target, ModuleType):
            return [
                value
                for value in vars(target).values()
                if isinstance(value, type)
                and issubclass(value, Controller)
                and value is not Controller
                and value.__module__ == target.__name__
            ]

        if isinstance(target, (str, re.Pattern)):
            return self._registry.find(target)

        msg = (
            f"Cannot mount {target!r}: expected a Controller subclass, a module, "
            f"a controller name, or a compiled regexp"
        )
        raise TypeError(msg)

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        # An app run without explicit mounts serves every registered controller
        if not self._mounted and not self._automount:
            logger.info("No controllers mounted; mounting all %d registered", len(self._registry))
            routes, mounted = self._routes, dict(self._mounted)
            try:
                for controller in self._registry:
                    self._mount_controller(controller)
            except Exception:
                # All or nothing, so the next freeze attempt fails the same way
                self._routes, self._mounted = routes, mounted
                raise

        self._sorted_routes = self._routes.sorted()
        self._middleware = tuple(self._middleware_list)
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Mount controllers and add middleware before calling app.run()."
            )
            raise RuntimeError(msg)
