"""
Bridging aiohttp coroutines into the threaded batch pipeline.

The rendering and asset-probe clients are async; the batch itself runs on a
plain worker thread with no event loop.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
from typing import Any, Awaitable, Callable, TypeVar

T = TypeVar("T")


def _loop_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


def dual(func: Callable[..., Awaitable[T]]) -> Callable[..., T]:
    """
    Make an ``async def`` callable from both worlds.

    Without a running loop the call blocks on ``asyncio.run`` and returns the
    result; inside a loop it returns the coroutine for the caller to await::

        @dual
        async def render_pdf(self, request): ...

        pdf = gateway.render_pdf(request)          # worker thread
        pdf = await gateway.render_pdf(request)    # async test or service
    """
    if not inspect.iscoroutinefunction(func):
        raise TypeError(f"@dual needs an async def function, got {func!r}")

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        coro = func(*args, **kwargs)
        if _loop_running():
            return coro
        return asyncio.run(coro)

    return wrapper  # type: ignore[return-value]
