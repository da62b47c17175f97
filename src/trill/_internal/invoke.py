"""Invoke helpers — call sync or async callables uniformly.

Component definitions, lifecycle hooks, error handlers, and session
``save()`` methods can all be ``def`` or ``async def``. The sync/async
check lives here only.
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it's awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


def positional_arity(func: Any) -> int | None:
    """Number of positional parameters *func* accepts.

    Returns ``None`` when it takes ``*args`` (any count).
    """
    count = 0
    for param in inspect.signature(func).parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            count += 1
    return count
