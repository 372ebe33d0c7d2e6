"""Invoke helpers — call sync or async callbacks uniformly.

Handlers, not-found handlers, and default-context functions can be
``def`` or ``async def``. This keeps the sync/async check in one place.

Usage::

    from perch._internal.invoke import invoke

    result = await invoke(handler, w, request)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's a coroutine."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
