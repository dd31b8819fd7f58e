"""
HTTP quote service.

Performs one GET against the quotable endpoint per call and decodes the body
into a Quote. Every failure comes back as a FetchResult, never as an exception.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Optional

import requests

from base_classes import FetchResult, QuoteServiceType
from core.models import FetchError, Quote

DEFAULT_ENDPOINT = 'https://api.quotable.io/random'


class QuoteService(QuoteServiceType):
    """Fetch a random quote from a fixed remote endpoint."""

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        *,
        timeout: Optional[float] = None,
        logger: Any = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.endpoint = endpoint or DEFAULT_ENDPOINT
        # None keeps the transport default (requests waits indefinitely)
        self.timeout = timeout
        self.logger = logger
        self._session = session

    @classmethod
    def from_config(cls, config: Any, logger: Any = None) -> 'QuoteService':
        endpoint = config.get_option('QUOTES', 'endpoint', fallback=DEFAULT_ENDPOINT)
        raw_timeout = config.get_option('QUOTES', 'timeout', fallback=None)
        timeout = None
        if raw_timeout not in (None, ''):
            try:
                timeout = float(raw_timeout)
            except (TypeError, ValueError):
                timeout = None
        return cls(str(endpoint or DEFAULT_ENDPOINT), timeout=timeout, logger=logger)

    async def get_random_quote(self) -> FetchResult:
        return await asyncio.to_thread(self.fetch_random_quote)

    def fetch_random_quote(self) -> FetchResult:
        """Blocking variant used by get_random_quote (runs in a worker thread)."""
        started = time.monotonic()
        self._log_begin()
        try:
            getter = self._session.get if self._session is not None else requests.get
            response = getter(self.endpoint, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
            quote = Quote.from_payload(payload)
        except requests.exceptions.JSONDecodeError as exc:
            result = FetchResult.failure(FetchError.wrap(exc, prefix='Invalid quote response'))
        except requests.RequestException as exc:
            result = FetchResult.failure(FetchError.wrap(exc))
        except FetchError as exc:
            result = FetchResult.failure(exc)
        except ValueError as exc:
            # Malformed JSON from a response object without requests' own decode error
            result = FetchResult.failure(FetchError.wrap(exc, prefix='Invalid quote response'))
        else:
            result = FetchResult.success(quote)
        self._log_done(result, started)
        return result

    # --- logging helpers -------------------------------------------------
    def _log_begin(self) -> None:
        if not self.logger:
            return
        try:
            self.logger.fetch_begin({'endpoint': self.endpoint, 'timeout': self.timeout})
        except Exception:
            pass

    def _log_done(self, result: FetchResult, started: float) -> None:
        if not self.logger:
            return
        meta = {
            'endpoint': self.endpoint,
            'ok': result.ok,
            'duration_ms': int((time.monotonic() - started) * 1000),
        }
        if result.error is not None:
            meta['error'] = result.error.description
        try:
            self.logger.fetch_done(meta)
        except Exception:
            pass
