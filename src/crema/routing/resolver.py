"""Route resolver — walks the sorted table once per request.

Resolution is first-match over templates ordered longest first, so
specificity is approximated by template length.  Outcomes are values,
never exceptions:

    Matched(ref, path_info)   run the action pipeline
    Rewritten(ref, captures)  call the rewriter, its result is the response
    VerbNotBound(allowed)     the path exists, the verb does not (501)
    Unmatched()               nothing matches the path (404)
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from crema.routing.table import ActionRef, RouteEntry


@dataclass(frozen=True, slots=True)
class Matched:
    ref: ActionRef
    path_info: str


@dataclass(frozen=True, slots=True)
class Rewritten:
    ref: ActionRef
    captures: tuple[str | None, ...]


@dataclass(frozen=True, slots=True)
class VerbNotBound:
    allowed: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class Unmatched:
    pass


type Resolution = Matched | Rewritten | VerbNotBound | Unmatched


def resolve(table: Sequence[RouteEntry], method: str, path: str) -> Resolution:
    """Resolve *method* and *path* against a sorted route table.

    The first pattern that matches decides the outcome, with one
    exception: a match whose first capture is absent does not count,
    and scanning continues with the next pattern.
    """
    for pattern, binding in table:
        match = pattern.match(path)
        if match is None:
            continue

        ref = binding.get(method)
        if ref is None:
            return VerbNotBound(tuple(binding))

        if ref.rewriter is not None:
            return Rewritten(ref, match.captures)

        path_info = match.first
        if path_info is None:
            continue
        return Matched(ref, path_info)

    return Unmatched()


def normalize_path_info(path_info: str) -> str:
    """Empty stays empty (already the root); anything else gets a leading ``/``."""
    if not path_info or path_info.startswith("/"):
        return path_info
    return "/" + path_info


def split_format(path_info: str, splitter: re.Pattern[str] | None) -> tuple[str, str | None]:
    """Split ``/page.json`` into ``("/page", "json")``.

    Without a splitter, or without a recognized suffix, the path is
    returned unchanged with no format.
    """
    if splitter is None:
        return path_info, None
    m = splitter.search(path_info)
    if m is None:
        return path_info, None
    return path_info[: m.start()], m.group(1)
