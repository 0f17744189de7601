from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Coroutine
from typing import Any, TypeVar

T = TypeVar("T")

# The event loop only keeps weak references to tasks.
_BACKGROUND: set[asyncio.Task[Any]] = set()


def ensure_task(coro: Coroutine[Any, Any, T], *, name: str | None = None) -> asyncio.Task[T]:
    t: asyncio.Task[T] = asyncio.create_task(coro, name=name)
    _BACKGROUND.add(t)
    t.add_done_callback(_BACKGROUND.discard)
    return t


async def cancel_suppress(task: asyncio.Task[Any] | None) -> None:
    if not task or task.done():
        return
    # Never cancel/await the current task; callers stop it by returning.
    if task is asyncio.current_task():
        return
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task
