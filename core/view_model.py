"""Quote view model: turns presentation Input events into Output events."""

from __future__ import annotations

import asyncio
from typing import Any, AsyncIterable, Optional, Set

from base_classes import FetchResult, QuoteServiceType, ViewModelType
from core.models import (
    FetchError,
    FetchFailed,
    FetchSucceeded,
    RefreshEnabled,
    RefreshRequested,
    ViewAppeared,
    describe_event,
)
from core.streams import EventChannel, Subscription


class QuoteViewModel(ViewModelType):
    """Drives the quote service from Input events and publishes Output events.

    Every Input starts its own fetch bracket::

        RefreshEnabled(False) -> fetch -> RefreshEnabled(True) + terminal event

    Overlapping Inputs are not serialized; each bracket runs as an independent
    task and their Outputs may interleave. Errors from the service never
    escape: they become FetchFailed events.
    """

    def __init__(self, quote_service: Optional[QuoteServiceType] = None, *, logger: Any = None) -> None:
        if quote_service is None:
            from providers.quote_service import QuoteService
            quote_service = QuoteService(logger=logger)
        self.quote_service = quote_service
        self.logger = logger
        self._output = EventChannel()
        self._input_subscription: Optional[Subscription] = None
        self._subscription_task: Optional[asyncio.Task] = None
        self._pending: Set[asyncio.Task] = set()
        self._closed = False

    # --- public API ----------------------------------------------------
    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def closed(self) -> bool:
        return self._closed

    def transform(self, inputs: AsyncIterable[Any]) -> Subscription:
        """Subscribe to ``inputs`` and return the Output sequence.

        Must be called from a running event loop. The returned iterator ends
        only after ``close()``.
        """
        if self._subscription_task is not None:
            raise RuntimeError('transform() can only be called once per view model')
        loop = asyncio.get_running_loop()
        # Subscribe to both ends now so nothing sent after this call is missed
        output = self._output.subscribe()
        if self._closed:
            return output
        if isinstance(inputs, EventChannel):
            source: AsyncIterable[Any] = inputs.subscribe()
            self._input_subscription = source  # type: ignore[assignment]
        else:
            source = inputs
        self._subscription_task = loop.create_task(self._consume(source))
        return output

    def handle_fetch(self) -> None:
        """Run one disable -> fetch -> enable bracket."""
        self._emit(RefreshEnabled(False))
        task = asyncio.get_running_loop().create_task(self._fetch())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def close(self, cancel_pending: bool = False) -> None:
        """Release the input subscription and complete the Output sequence.

        In-flight fetches keep running unless ``cancel_pending`` is set; their
        late Outputs are dropped because the channel is already closed.
        """
        if self._closed:
            return
        self._closed = True
        if self._input_subscription is not None:
            self._input_subscription.cancel()
        task = self._subscription_task
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        if cancel_pending and self._pending:
            pending = list(self._pending)
            for t in pending:
                t.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
        self._output.close()
        self._log('closed', {'cancel_pending': cancel_pending, 'pending': len(self._pending)})

    async def __aenter__(self) -> 'QuoteViewModel':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # --- internals -----------------------------------------------------
    async def _consume(self, source: AsyncIterable[Any]) -> None:
        try:
            async for event in source:
                self._log_input(event)
                if isinstance(event, ViewAppeared):
                    self.handle_fetch()
                elif isinstance(event, RefreshRequested):
                    self.handle_fetch()
                else:
                    self._log('input_ignored', {'type': type(event).__name__})
        except Exception as exc:
            # The Input source died; no further fetches will be started
            self._log_error(exc)
            self._log('input_failed', {'error': str(exc) or type(exc).__name__})

    async def _fetch(self) -> None:
        try:
            result = await self.quote_service.get_random_quote()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._log_error(exc)
            result = FetchResult.failure(FetchError.wrap(exc))

        # Success reports before re-enabling; failure re-enables first
        if result.ok:
            self._emit(FetchSucceeded(result.quote))
            self._emit(RefreshEnabled(True))
        else:
            self._emit(RefreshEnabled(True))
            self._emit(FetchFailed(result.error))

    def _emit(self, event: Any) -> None:
        self._output.send(event)
        if self.logger:
            try:
                self.logger.output_event(describe_event(event))
            except Exception:
                pass

    def _log_input(self, event: Any) -> None:
        if not self.logger:
            return
        try:
            self.logger.input_event(describe_event(event))
        except Exception:
            pass

    def _log(self, kind: str, details: dict) -> None:
        if not self.logger:
            return
        try:
            self.logger.log(kind, component='core.view_model', aspect='events', data=details)
        except Exception:
            pass

    def _log_error(self, exc: BaseException) -> None:
        if not self.logger:
            return
        try:
            self.logger.error('core.view_model', exc)
        except Exception:
            pass
