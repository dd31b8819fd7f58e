"""
Mock quote service for running quote-transform without network access.
Returns a fixed quote, a fixed error, or never resolves at all.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from base_classes import FetchResult, QuoteServiceType
from core.models import FetchError, Quote


class MockQuoteService(QuoteServiceType):
    """
    A stub service with a configurable outcome.

    - value set: every call succeeds with it
    - error set: every call fails with it
    - neither: every call stays pending forever
    - gate: when given, calls wait on the event before resolving
    """

    def __init__(
        self,
        value: Optional[Quote] = None,
        error: Optional[FetchError] = None,
        gate: Optional[asyncio.Event] = None,
    ) -> None:
        if value is not None and error is not None:
            raise ValueError('MockQuoteService takes a value or an error, not both')
        self.value = value
        self.error = error
        self.gate = gate
        self.call_count = 0

    async def get_random_quote(self) -> FetchResult:
        self.call_count += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.value is not None:
            return FetchResult.success(self.value)
        if self.error is not None:
            return FetchResult.failure(self.error)
        # Nothing configured: the fetch never completes
        return await asyncio.Future()
