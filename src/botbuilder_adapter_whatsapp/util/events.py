from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

Listener = Callable[..., Awaitable[None]] | Callable[..., None]


class AsyncEventEmitter:
    """
    Small async-friendly event emitter.

    - `on(event, fn)` registers a listener (sync or async).
    - `emit(event, *args)` calls listeners in registration order and awaits
      async ones. A failing listener is logged and does not stop the others,
      so observers cannot tear down the loop that emits.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def on(self, event: str, listener: Listener) -> None:
        self._listeners[event].append(listener)

    async def emit(self, event: str, *args: Any) -> bool:
        triggered = False
        for listener in list(self._listeners.get(event, [])):
            triggered = True
            try:
                res = listener(*args)
                if asyncio.iscoroutine(res):
                    await res
            except Exception:
                logger.exception("listener for %r failed", event)

        return triggered
