from __future__ import annotations

from typing import Any, Dict, Optional

from core.models import FetchError, Quote
from ui.base import UI


class CLIUI(UI):
    """Console surface: prints quotes and errors through an OutputHandler."""

    def __init__(self, output, *, show_author: bool = True) -> None:
        super().__init__()
        self.output = output
        self.show_author = show_author
        self.last_text: Optional[str] = None

    # Output hooks -------------------------------------------------------
    def set_refresh_enabled(self, enabled: bool) -> None:
        if enabled:
            self.output.debug("[refresh enabled]")
        else:
            self.output.status("Fetching a quote...")

    def show_quote(self, quote: Quote) -> None:
        self.last_text = quote.content
        self.output.write(quote.content, spacing=[1, 0])
        if self.show_author and quote.author:
            self.output.write(self.output.style_text(f"  - {quote.author}", dim=True), spacing=[0, 1])

    def show_error(self, error: FetchError) -> None:
        self.last_text = error.description
        self.output.error(error.description)

    # Input helpers ------------------------------------------------------
    def refresh_requested(self) -> None:
        if not self.refresh_enabled:
            # Still forwarded: overlapping fetches are allowed
            self.output.warning("A fetch is already in progress; starting another one.")
        super().refresh_requested()

    # Events -------------------------------------------------------------
    def emit(self, event_type: str, data: Dict[str, Any]) -> None:
        out = self.output
        et = (event_type or 'status').lower()
        message = str(data.get('message', ''))
        if et == 'warning':
            out.warning(message)
        elif et == 'error':
            out.error(message)
        elif et == 'debug':
            out.debug(message)
        else:
            out.write(message)
