"""Route compiler — turns a controller's actions into patterns and bindings.

Action names carry their HTTP verb as an optional prefix::

    index           -> every verb, at the controller's base URL
    edit            -> every verb, at <base>/edit
    post_edit       -> POST only, at <base>/edit
    get_feed____rss -> GET only,  at <base>/feed.rss
    post_get_verb   -> POST only, at <base>/get_verb  (only the first verb counts)
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING

from crema.controller import Controller
from crema.routing.pattern import FormatSplit, Literal, RoutePattern, Segment, Tail
from crema.routing.table import HTTP_METHODS, ActionRef, RouteTable

if TYPE_CHECKING:
    from crema.controller import ControllerConfig

logger = logging.getLogger("crema.routing")

# Applied longest first so "____" is not eaten as two "__"
_NAME_TO_PATH = (("____", "."), ("___", "-"), ("__", "/"))


def split_action_name(name: str) -> tuple[tuple[str, ...], str]:
    """Split an action name into its verbs and canonical name.

    Only the first ``<verb>_`` token is honored.  A second verb-shaped
    token stays part of the path and is logged, since it reads like a
    restriction it is not.
    """
    head, sep, rest = name.partition("_")
    if not (sep and rest and head.upper() in HTTP_METHODS):
        return HTTP_METHODS, name

    extra = [token for token in rest.split("_") if token.upper() in HTTP_METHODS]
    if extra:
        logger.warning(
            "Action %r is bound to %s only; %s in the rest of the name is "
            "treated as part of the path",
            name,
            head.upper(),
            ", ".join(repr(t) for t in extra),
        )
    return (head.upper(),), rest


def action_to_path(canonical: str) -> str:
    """Map a canonical action name to its URL fragment.

    ``index`` is the controller root (``""``); ``__`` becomes ``/``,
    ``___`` becomes ``-`` and ``____`` becomes ``.``.
    """
    if canonical == "index":
        return ""
    path = canonical
    for token, replacement in _NAME_TO_PATH:
        path = path.replace(token, replacement)
    return path


def discover_actions(controller: type[Controller]) -> list[str]:
    """Public functions defined on *controller* and its user base classes.

    Definition order is kept; ``Controller`` itself contributes nothing.
    """
    names: dict[str, None] = {}
    for klass in reversed(controller.__mro__):
        if not issubclass(klass, Controller) or klass is Controller:
            continue
        for name, value in vars(klass).items():
            if name.startswith("_") or not inspect.isfunction(value):
                continue
            names.setdefault(name, None)
    return list(names)


def join_url(base: str, fragment: str) -> str:
    fragment = fragment.strip("/")
    if not fragment:
        return base
    return f"{base}/{fragment}"


def action_pattern(source: str, formats: tuple[str, ...] = ()) -> RoutePattern:
    """Pattern for an action: literal prefix, path-info tail, optional format."""
    segments: list[Segment] = [Literal(part) for part in source.split("/") if part]
    segments.append(Tail())
    if formats:
        segments.append(FormatSplit(formats))
    return RoutePattern(source, tuple(segments))


def compile_routes(config: ControllerConfig, *, replace: bool = False) -> RouteTable:
    """Compile *config* into the controller's own ``RouteTable``."""
    controller = config.controller
    table = RouteTable()
    middleware = tuple(spec.build() for spec in config.middleware)
    bases = (config.url, *config.canonicals)

    for name in discover_actions(controller):
        verbs, canonical = split_action_name(name)
        fragments = (
            config.aliases.get(name)
            or config.aliases.get(canonical)
            or [action_to_path(canonical)]
        )
        formats = (
            config.action_formats.get(name)
            or config.action_formats.get(canonical)
            or config.formats
        )
        splitter = FormatSplit(formats).splitter() if formats else None

        for base in bases:
            for fragment in fragments:
                source = join_url(base, fragment)
                ref = ActionRef(
                    controller,
                    name,
                    path=source,
                    format_splitter=splitter,
                    middleware=middleware,
                )
                pattern = action_pattern(source, formats)
                for verb in verbs:
                    table.bind(pattern, verb, ref, replace=replace)

    for template, rewriter in config.rewrites:
        for base in bases:
            source = join_url(base, template)
            pattern = RoutePattern.from_template(source)
            ref = ActionRef(
                controller,
                getattr(rewriter, "__name__", "rewrite"),
                path=source,
                rewriter=rewriter,
            )
            for verb in HTTP_METHODS:
                table.bind(pattern, verb, ref, replace=replace)

    logger.debug(
        "Compiled %d route(s) for %s under %r",
        len(table),
        controller.__name__,
        config.url or "/",
    )
    return table
