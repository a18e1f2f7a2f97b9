"""Routing — controller actions compiled into length-sorted patterns.

Controllers are compiled into route tables when mounted; the app merges
them into one table and freezes it into a tuple sorted by template
length, which the resolver walks first-match per request.
"""

from crema.routing.pattern import FormatSplit, Literal, Parameter, RoutePattern, Tail
from crema.routing.resolver import Matched, Rewritten, Unmatched, VerbNotBound, resolve
from crema.routing.table import HTTP_METHODS, ActionRef, RouteTable
from crema.routing.urlmap import UrlMap

__all__ = [
    "HTTP_METHODS",
    "ActionRef",
    "FormatSplit",
    "Literal",
    "Matched",
    "Parameter",
    "Rewritten",
    "RoutePattern",
    "RouteTable",
    "Tail",
    "Unmatched",
    "UrlMap",
    "VerbNotBound",
    "resolve",
]
