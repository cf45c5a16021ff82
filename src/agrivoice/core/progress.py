"""Multi-subscriber progress reporting for model loads.

Subscribers are plain callables or async iterators; publishing never
blocks and a failing subscriber does not disturb the others.
"""

import asyncio
from collections.abc import AsyncIterator, Callable

from agrivoice.core.env import LOGGER
from agrivoice.core.types import ProgressEvent

ProgressCallback = Callable[[ProgressEvent], None]

_TERMINAL = object()


class ProgressBus:
    """Fan-out of ProgressEvents to any number of subscribers."""

    def __init__(self) -> None:
        self._callbacks: list[ProgressCallback] = []
        self._queues: list[asyncio.Queue] = []
        self.last: ProgressEvent | None = None

    def subscribe(self, callback: ProgressCallback) -> Callable[[], None]:
        """Register *callback*; returns a function that unregisters it."""
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def publish(self, event: ProgressEvent, *, terminal: bool = False) -> None:
        self.last = event
        for callback in list(self._callbacks):
            try:
                callback(event)
            except Exception:
                LOGGER.warning("Progress subscriber failed", exc_info=True)
        for queue in list(self._queues):
            queue.put_nowait(event)
            if terminal:
                queue.put_nowait(_TERMINAL)

    def reset(self) -> None:
        self.last = None

    async def events(self) -> AsyncIterator[ProgressEvent]:
        """Yield events until the current load session ends."""
        queue: asyncio.Queue = asyncio.Queue()
        self._queues.append(queue)
        try:
            while True:
                item = await queue.get()
                if item is _TERMINAL:
                    return
                yield item
        finally:
            self._queues.remove(queue)
