"""Controller registry — explicit discovery of declared controllers.

Controllers register themselves when their module is imported::

    from crema import Controller, register

    @register
    class Forum(Controller):
        url = "/forum"

An ``App(automount=True)`` then mounts everything in the registry, and
``app.mount("Forum")`` or ``app.mount(re.compile(r"^shop\\."))`` select
registered controllers by name or regexp.  Apps that need isolation
(tests, several apps in one process) pass their own ``ControllerRegistry``.
"""

from __future__ import annotations

import re
import threading
from collections.abc import Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from crema.controller import Controller


def qualified_name(cls: type) -> str:
    """``module.Outer.Inner`` for a class."""
    return f"{cls.__module__}.{cls.__qualname__}"


class ControllerRegistry:
    """Ordered set of controller classes, keyed by qualified name.

    Registration normally happens at import time, but a lock keeps it
    safe when modules are imported from several threads.
    """

    __slots__ = ("_controllers", "_lock")

    def __init__(self) -> None:
        self._controllers: dict[str, type[Controller]] = {}
        self._lock = threading.Lock()

    def register[C: type[Controller]](self, cls: C) -> C:
        """Register *cls*; usable as a class decorator. Re-registering is a no-op."""
        from crema.controller import Controller

        if not (isinstance(cls, type) and issubclass(cls, Controller)):
            msg = f"Only Controller subclasses can be registered, got {cls!r}"
            raise TypeError(msg)
        with self._lock:
            self._controllers.setdefault(qualified_name(cls), cls)
        return cls

    def unregister(self, cls: type[Controller]) -> None:
        with self._lock:
            self._controllers.pop(qualified_name(cls), None)

    def __iter__(self) -> Iterator[type[Controller]]:
        return iter(list(self._controllers.values()))

    def __len__(self) -> int:
        return len(self._controllers)

    def __contains__(self, cls: object) -> bool:
        return isinstance(cls, type) and self._controllers.get(qualified_name(cls)) is cls

    def find(self, namespace: str | re.Pattern[str]) -> list[type[Controller]]:
        """Controllers selected by name or regexp.

        A string matches the qualified name (``app.forum.Forum``), the
        qualname (``Site.Forum``) or the bare class name (``Forum``).
        A compiled regexp is searched against the qualified name.
        """
        if isinstance(namespace, re.Pattern):
            return [c for name, c in self._controllers.items() if namespace.search(name)]
        return [
            c
            for name, c in self._controllers.items()
            if namespace in (name, c.__qualname__, c.__name__)
        ]


controllers = ControllerRegistry()
"""The default registry, used by ``App`` unless another one is given."""

register = controllers.register
