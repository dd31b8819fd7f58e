from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

from core.models import (
    FetchError,
    FetchFailed,
    FetchSucceeded,
    Quote,
    RefreshEnabled,
    RefreshRequested,
    ViewAppeared,
)
from core.streams import EventChannel


class UI:
    """Abstract presentation surface.

    Owns the Input channel fed to ``view_model.transform`` and renders each
    Output event through the ``set_refresh_enabled``/``show_quote``/``show_error``
    hooks implemented by subclasses.
    """

    def __init__(self) -> None:
        self.inputs = EventChannel()
        self.refresh_enabled = True
        self._render_task: Optional[asyncio.Task] = None

    # Input events -------------------------------------------------------
    def view_appeared(self) -> None:
        self.inputs.send(ViewAppeared())

    def refresh_requested(self) -> None:
        self.inputs.send(RefreshRequested())

    # Binding ------------------------------------------------------------
    def bind(self, view_model) -> asyncio.Task:
        """Connect to a view model and start rendering its Output events.

        Must be called from a running event loop, before any Input is sent.
        """
        if self._render_task is not None:
            raise RuntimeError('UI is already bound to a view model')
        outputs = view_model.transform(self.inputs)
        self._render_task = asyncio.get_running_loop().create_task(self._render_all(outputs))
        return self._render_task

    async def wait_closed(self) -> None:
        """Wait until the bound Output sequence completes."""
        if self._render_task is not None:
            await self._render_task

    def close(self) -> None:
        self.inputs.close()

    async def _render_all(self, outputs) -> None:
        async for event in outputs:
            self.render(event)

    def render(self, event: Any) -> None:
        if isinstance(event, RefreshEnabled):
            self.refresh_enabled = bool(event.enabled)
            self.set_refresh_enabled(self.refresh_enabled)
        elif isinstance(event, FetchSucceeded):
            self.show_quote(event.quote)
        elif isinstance(event, FetchFailed):
            self.show_error(event.error)
        else:
            self.emit('warning', {'message': f"Unhandled output event: {type(event).__name__}"})

    # Output hooks -------------------------------------------------------
    def set_refresh_enabled(self, enabled: bool) -> None:
        raise NotImplementedError

    def show_quote(self, quote: Quote) -> None:
        raise NotImplementedError

    def show_error(self, error: FetchError) -> None:
        raise NotImplementedError

    # Fire-and-forget updates -------------------------------------------
    def emit(self, event_type: str, data: Dict[str, Any]) -> None:
        raise NotImplementedError
