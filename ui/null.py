from __future__ import annotations

from typing import Any, Dict, List

from core.models import FetchError, Quote
from ui.base import UI


class NullUI(UI):
    """A non-interactive surface for scripted runs and tests.

    - Does not print to stdout; records rendered outputs for inspection.
    - ``rendered`` keeps the raw Output events in arrival order.
    """

    def __init__(self) -> None:
        super().__init__()
        self.rendered: List[Any] = []
        self.events: List[Dict[str, Any]] = []
        self.text: str = ''

    def render(self, event: Any) -> None:
        self.rendered.append(event)
        super().render(event)

    def set_refresh_enabled(self, enabled: bool) -> None:
        self.events.append({'type': 'refresh_enabled', 'enabled': enabled})

    def show_quote(self, quote: Quote) -> None:
        self.text = quote.content
        self.events.append({'type': 'quote', 'content': quote.content, 'author': quote.author})

    def show_error(self, error: FetchError) -> None:
        self.text = error.description
        self.events.append({'type': 'error', 'message': error.description})

    def emit(self, event_type: str, data: Dict[str, Any]) -> None:
        # Store, but do not print
        self.events.append({'type': event_type, **(data or {})})
