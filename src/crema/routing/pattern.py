"""Route patterns compiled from tagged path segments.

A pattern is an ordered tuple of segments, each one of:

    Literal("blog")            ``/blog``
    Parameter("id")            ``/{id}``        one path segment
    Parameter("id", optional)  ``/{id?}``       one segment, may be absent
    Parameter("rest", greedy)  ``/{rest:path}`` the remainder of the path
    Tail()                     the action's path info: ``""`` or ``/...``
    FormatSplit(("json",))     an optional ``.json`` suffix

Segments are compiled once into a single anchored regexp.  Captures come
back in declaration order; absent optional groups are ``None``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from crema.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class Literal:
    """A fixed path segment."""

    text: str


@dataclass(frozen=True, slots=True)
class Parameter:
    """A captured path segment (or the rest of the path when greedy)."""

    name: str
    greedy: bool = False
    optional: bool = False


@dataclass(frozen=True, slots=True)
class Tail:
    """Everything after the literal prefix, empty or starting with ``/``.

    The capture always participates in a match, possibly as ``""``.
    """


@dataclass(frozen=True, slots=True)
class FormatSplit:
    """An optional ``.<format>`` suffix from a closed set of tokens."""

    formats: tuple[str, ...]

    @property
    def suffix_regex(self) -> str:
        alternatives = "|".join(re.escape(f) for f in self.formats)
        return rf"(?:\.(?:{alternatives}))?"

    def splitter(self) -> re.Pattern[str]:
        """Regexp that pulls the format token off the end of a path."""
        alternatives = "|".join(re.escape(f) for f in self.formats)
        return re.compile(rf"\.({alternatives})$")


type Segment = Literal | Parameter | Tail | FormatSplit


def normalize_formats(formats: tuple[str, ...] | list[str]) -> tuple[str, ...]:
    """``(".json", "xml")`` -> ``("json", "xml")``, order kept, duplicates dropped."""
    seen: dict[str, None] = {}
    for fmt in formats:
        token = fmt.lstrip(".")
        if not token or "/" in token:
            msg = f"Invalid format {fmt!r}"
            raise ConfigurationError(msg)
        seen.setdefault(token, None)
    return tuple(seen)


def parse_template(template: str) -> tuple[Segment, ...]:
    """Parse a path template into segments.

    Examples::

        "/blog"              -> (Literal("blog"),)
        "/blog/{slug}"       -> (Literal("blog"), Parameter("slug"))
        "/blog/{page?}"      -> (Literal("blog"), Parameter("page", optional=True))
        "/files/{rest:path}" -> (Literal("files"), Parameter("rest", greedy=True))
    """
    segments: list[Segment] = []
    for part in template.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("{") and part.endswith("}"):
            inner = part[1:-1]
            optional = inner.endswith("?")
            inner = inner.rstrip("?")
            name, _, kind = inner.partition(":")
            if not name or kind not in ("", "path"):
                msg = f"Invalid parameter {part!r} in route template {template!r}"
                raise ConfigurationError(msg)
            segments.append(Parameter(name, greedy=kind == "path", optional=optional))
        elif "{" in part or "}" in part:
            msg = f"Unbalanced braces in route template {template!r}"
            raise ConfigurationError(msg)
        else:
            segments.append(Literal(part))
    return tuple(segments)


def _compile(segments: tuple[Segment, ...]) -> re.Pattern[str]:
    parts: list[str] = ["^"]
    for i, seg in enumerate(segments):
        match seg:
            case Literal(text=text):
                parts.append("/" + re.escape(text))
            case Parameter(greedy=greedy, optional=optional):
                body = ".+" if greedy else "[^/]+"
                parts.append(f"(?:/({body}))?" if optional else f"/({body})")
            case Tail():
                following = segments[i + 1] if i + 1 < len(segments) else None
                if isinstance(following, FormatSplit):
                    parts.append(f"((?:/.*?)?{following.suffix_regex})")
                else:
                    parts.append("((?:/.*)?)")
            case FormatSplit():
                # Folded into the preceding Tail's capture
                if i > 0 and isinstance(segments[i - 1], Tail):
                    continue
                parts.append(seg.suffix_regex)
    if not segments or isinstance(segments[-1], (Literal, Parameter)):
        parts.append("/?")
    parts.append("$")
    return re.compile("".join(parts))


@dataclass(frozen=True, slots=True)
class PatternMatch:
    """Captures produced by a successful pattern match."""

    captures: tuple[str | None, ...]

    @property
    def first(self) -> str | None:
        """The first capture group, or ``None`` when absent."""
        return self.captures[0] if self.captures else None


@dataclass(frozen=True, slots=True, eq=False)
class RoutePattern:
    """An immutable compiled matcher over a path template.

    Identity is the ``source`` template: one pattern per distinct literal
    template.  ``source`` length also decides resolution priority.
    """

    source: str
    segments: tuple[Segment, ...]
    regex: re.Pattern[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        for i, seg in enumerate(self.segments):
            if isinstance(seg, FormatSplit) and i != len(self.segments) - 1:
                msg = f"FormatSplit must be the last segment of {self.source!r}"
                raise ConfigurationError(msg)
        object.__setattr__(self, "regex", _compile(self.segments))

    @classmethod
    def from_template(cls, template: str) -> RoutePattern:
        """Compile a ``{param}``-style template."""
        return cls(template, parse_template(template))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RoutePattern):
            return NotImplemented
        return self.source == other.source

    def __hash__(self) -> int:
        return hash(self.source)

    @property
    def formats(self) -> tuple[str, ...]:
        """Format tokens accepted by this pattern, if any."""
        last = self.segments[-1] if self.segments else None
        return last.formats if isinstance(last, FormatSplit) else ()

    def match(self, path: str) -> PatternMatch | None:
        """Match *path*, returning captures or ``None``."""
        m = self.regex.match(path)
        if m is None:
            return None
        return PatternMatch(m.groups())
