"""URL map — a human-readable report of what the app answers.

``UrlMap`` is a plain ordered dict ``{template: {verb: "Controller#action"}}``
in resolution order; ``str()`` renders it::

    /articles/edit
      POST      Articles#post_edit

    /articles
      GET       Articles#index
      POST      Articles#index
      ...
"""

from __future__ import annotations

from collections.abc import Iterable

from crema.routing.table import RouteEntry


class UrlMap(dict[str, dict[str, str]]):
    """Ordered mapping of route template to ``{verb: "Controller#action"}``."""

    @classmethod
    def from_routes(cls, routes: Iterable[RouteEntry]) -> UrlMap:
        url_map = cls()
        for pattern, binding in routes:
            row = url_map.setdefault(pattern.source, {})
            for verb, ref in binding.items():
                row[verb] = ref.target
        return url_map

    def __str__(self) -> str:
        out: list[str] = []
        for source, verbs in self.items():
            # The bare root pattern matches everything and says nothing
            if not source:
                continue
            out.append(f"{source}\n")
            for verb, target in verbs.items():
                out.append(f"  {verb:<10}{target}\n")
            out.append("\n")
        return "".join(out)
