"""Push-based event channel for wiring a presentation surface to a view model.

An ``EventChannel`` behaves like a passthrough subject: subscribers only see
events sent after they subscribed, and nothing is replayed. Each subscription
owns its own ``asyncio.Queue`` so a slow consumer never drops events.
"""

from __future__ import annotations

import asyncio
from typing import Any, List, Optional

_CLOSED = object()


class Subscription:
    """Async iterator over the events delivered to one subscriber."""

    def __init__(self, channel: Optional['EventChannel'] = None) -> None:
        self._channel = channel
        self._queue: asyncio.Queue = asyncio.Queue()
        self._finished = False

    @property
    def active(self) -> bool:
        return not self._finished

    def _push(self, event: Any) -> None:
        if not self._finished:
            self._queue.put_nowait(event)

    def _finish(self) -> None:
        if self._finished:
            return
        self._finished = True
        # Sentinel goes behind anything already queued so pending events drain first
        self._queue.put_nowait(_CLOSED)

    def cancel(self) -> None:
        """Detach from the channel and end iteration once queued events drain."""
        if self._channel is not None:
            self._channel._detach(self)
        self._finish()

    def __aiter__(self) -> 'Subscription':
        return self

    async def __anext__(self) -> Any:
        item = await self._queue.get()
        if item is _CLOSED:
            # Keep the sentinel so repeated iteration also stops
            self._queue.put_nowait(_CLOSED)
            raise StopAsyncIteration
        return item


class EventChannel:
    """Fan-out channel; all sends happen on the loop that owns the subscribers."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._subscribers: List[Subscription] = []
        self._closed = False
        self._loop = loop

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> Subscription:
        if self._loop is None:
            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError:
                self._loop = None
        sub = Subscription(self)
        if self._closed:
            sub._finish()
        else:
            self._subscribers.append(sub)
        return sub

    def send(self, event: Any) -> None:
        if self._closed:
            return
        for sub in list(self._subscribers):
            sub._push(event)

    def send_threadsafe(self, event: Any) -> None:
        """Schedule ``send`` on the owning loop from any thread."""
        if self._loop is None:
            raise RuntimeError('EventChannel has no event loop yet; subscribe from a running loop first')
        self._loop.call_soon_threadsafe(self.send, event)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        subscribers, self._subscribers = self._subscribers, []
        for sub in subscribers:
            sub._finish()

    def _detach(self, sub: Subscription) -> None:
        try:
            self._subscribers.remove(sub)
        except ValueError:
            pass

    def __aiter__(self) -> Subscription:
        return self.subscribe()


__all__ = ['EventChannel', 'Subscription']
