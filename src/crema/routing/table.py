"""Route table — compiled patterns mapped to per-verb action bindings.

Tables are built incrementally while controllers are mounted, then
frozen into a length-sorted tuple that the resolver walks per request.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

from crema.errors import ConfigurationError, RouteConflict
from crema.routing.pattern import RoutePattern

logger = logging.getLogger("crema.routing")

# Verbs an unprefixed action answers, in the order the URL map lists them
HTTP_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")


@dataclass(frozen=True, slots=True)
class ActionRef:
    """What a (pattern, verb) pair dispatches to.

    ``path`` is the script name written back into the request on dispatch.
    ``rewriter`` short-circuits the action pipeline when set.
    ``format_splitter`` pulls ``.json``-style suffixes off the path info.
    ``middleware`` is the controller's chain for this mount, outermost first.
    """

    controller: type[Any]
    action: str
    path: str = ""
    rewriter: Callable[..., Any] | None = None
    format_splitter: re.Pattern[str] | None = None
    middleware: tuple[Callable[..., Any], ...] = field(default=(), compare=False, repr=False)

    @property
    def target(self) -> str:
        """``Controller#action`` label used by the URL map and errors."""
        return f"{self.controller.__name__}#{self.action}"


# verb -> action
type VerbBinding = dict[str, ActionRef]

# One resolved row of the sorted table
type RouteEntry = tuple[RoutePattern, VerbBinding]


class RouteTable:
    """Mutable mapping of ``RoutePattern -> {verb: ActionRef}``.

    Usage::

        table = RouteTable()
        table.bind(pattern, "GET", ActionRef(Blog, "index"))
        table.merge(other_table)
        for pattern, binding in table.sorted():
            ...

    ``merge`` refuses to rebind a (pattern, verb) pair to a different
    action unless ``replace=True``, in which case the later binding wins
    and a warning is logged.
    """

    __slots__ = ("_entries", "_patterns", "_sorted")

    def __init__(self) -> None:
        self._entries: dict[RoutePattern, VerbBinding] = {}
        self._patterns: dict[str, RoutePattern] = {}
        self._sorted: tuple[RouteEntry, ...] | None = None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RoutePattern]:
        return iter(self._entries)

    def __contains__(self, pattern: object) -> bool:
        return pattern in self._entries

    def __getitem__(self, pattern: RoutePattern) -> VerbBinding:
        return self._entries[pattern]

    def items(self) -> Iterator[RouteEntry]:
        return iter(self._entries.items())

    def bind(
        self,
        pattern: RoutePattern,
        verb: str,
        ref: ActionRef,
        *,
        replace: bool = False,
    ) -> None:
        """Bind *verb* on *pattern* to *ref*."""
        existing_pattern = self._canonical_pattern(pattern)
        binding = self._entries.setdefault(existing_pattern, {})
        current = binding.get(verb)
        if current is not None and current != ref:
            if not replace:
                raise RouteConflict(pattern.source, verb, current.target, ref.target)
            logger.warning(
                "%s %r rebound from %s to %s",
                verb,
                pattern.source or "/",
                current.target,
                ref.target,
            )
        binding[verb] = ref
        self._sorted = None

    def merge(self, other: RouteTable, *, replace: bool = False) -> None:
        """Merge every binding of *other* into this table."""
        for pattern, binding in other.items():
            for verb, ref in binding.items():
                self.bind(pattern, verb, ref, replace=replace)

    def copy(self) -> RouteTable:
        """A table with the same bindings that can be changed independently."""
        clone = RouteTable()
        clone._entries = {p: dict(b) for p, b in self._entries.items()}
        clone._patterns = dict(self._patterns)
        return clone

    def sorted(self) -> tuple[RouteEntry, ...]:
        """Entries ordered by descending template length, cached.

        Longer templates are tried first so that ``/a/b`` is not shadowed
        by ``/a``.  Ties keep registration order.
        """
        if self._sorted is None:
            self._sorted = tuple(
                sorted(
                    ((p, dict(b)) for p, b in self._entries.items()),
                    key=lambda entry: len(entry[0].source),
                    reverse=True,
                )
            )
        return self._sorted

    def _canonical_pattern(self, pattern: RoutePattern) -> RoutePattern:
        """Return the stored pattern with the same source, checking shape."""
        stored = self._patterns.setdefault(pattern.source, pattern)
        if stored.segments != pattern.segments:
            msg = (
                f"Route template {pattern.source!r} is registered twice "
                f"with different shapes ({stored.formats or 'no formats'} "
                f"vs {pattern.formats or 'no formats'})"
            )
            raise ConfigurationError(msg)
        return stored
