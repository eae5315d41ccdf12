"""
Progress reporting for recognition runs.

Engines report opaque ProgressEvents through a plain callback; the
ProgressStream turns those into an observable that any number of
subscribers (callbacks or ``async for`` consumers) can follow without
blocking the recognition call. Engines run in a worker thread, so events
published from there are marshalled onto the event loop.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import AsyncIterator, Callable

logger = logging.getLogger(__name__)

_CLOSED = object()


@dataclass(frozen=True)
class ProgressEvent:
    """One opaque progress record from an engine.

    Attributes:
        status: Free-form description of what the engine is doing.
        progress: Completion fraction in [0, 1] for ``status``.
        engine: Name of the engine that emitted the event.
    """

    status: str
    progress: float = 0.0
    engine: str | None = None


ProgressCallback = Callable[[ProgressEvent], None]


class ProgressStream:
    """Fan-out of ProgressEvents to callbacks and async iterators.

    Must be created inside a running event loop. publish() may be called
    from any thread.
    """

    def __init__(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._owner_thread = threading.get_ident()
        self._callbacks: list[ProgressCallback] = []
        self._queues: list[asyncio.Queue] = []
        self._closed = False
        self.history: list[ProgressEvent] = []

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, callback: ProgressCallback) -> Callable[[], None]:
        """Register a callback; returns a function that unregisters it."""
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def publish(self, event: ProgressEvent) -> None:
        """Deliver an event to all subscribers (thread-safe)."""
        if self._closed:
            logger.debug("Dropping progress event after close: %s", event)
            return
        if threading.get_ident() == self._owner_thread:
            self._dispatch(event)
        else:
            self._loop.call_soon_threadsafe(self._dispatch, event)

    def _dispatch(self, event: ProgressEvent) -> None:
        if self._closed:
            logger.debug("Dropping progress event after close: %s", event)
            return
        self.history.append(event)
        for callback in list(self._callbacks):
            try:
                callback(event)
            except Exception:
                logger.exception("Progress subscriber %r failed", callback)
        for queue in self._queues:
            queue.put_nowait(event)

    def close(self) -> None:
        """End the stream; pending async iterators finish after draining."""
        if self._closed:
            return
        self._closed = True
        for queue in self._queues:
            queue.put_nowait(_CLOSED)

    async def events(self) -> AsyncIterator[ProgressEvent]:
        """Iterate over past and future events until the stream closes."""
        queue: asyncio.Queue = asyncio.Queue()
        for event in self.history:
            queue.put_nowait(event)
        if self._closed:
            queue.put_nowait(_CLOSED)
        else:
            self._queues.append(queue)

        try:
            while True:
                item = await queue.get()
                if item is _CLOSED:
                    return
                yield item
        finally:
            if queue in self._queues:
                self._queues.remove(queue)
