"""Invoke helpers — call sync or async callables uniformly.

Actions, rewriters and middleware can be ``def`` or ``async def``.
Any code that calls one goes through ``invoke`` so the sync/async check
lives in exactly one place.

Usage::

    from crema._internal.invoke import invoke

    result = await invoke(action, *path_args)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it's awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
