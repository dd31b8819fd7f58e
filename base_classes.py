"""
Abstract base classes for quote-transform components.

These classes define the interfaces that quote services and view models
must implement so they can be swapped for one another (a real HTTP service
in the app, a deterministic stub in tests).
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, AsyncIterable, AsyncIterator, Optional

from core.models import FetchError, Quote


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one fetch: exactly one of quote/error is set."""

    quote: Optional[Quote] = None
    error: Optional[FetchError] = None

    def __post_init__(self) -> None:
        if (self.quote is None) == (self.error is None):
            raise ValueError('FetchResult needs exactly one of quote or error')

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, quote: Quote) -> 'FetchResult':
        return cls(quote=quote)

    @classmethod
    def failure(cls, error: FetchError) -> 'FetchResult':
        return cls(error=error)


class QuoteServiceType(ABC):
    """
    Abstract capability for fetching a random quote
    """

    @abstractmethod
    async def get_random_quote(self) -> FetchResult:
        """Fetch one quote. Failures are returned, never raised."""
        pass


class ViewModelType(ABC):
    """
    Abstract class for Input -> Output view models
    """

    @abstractmethod
    def transform(self, inputs: AsyncIterable[Any]) -> AsyncIterator[Any]:
        pass

    @abstractmethod
    async def close(self, cancel_pending: bool = False) -> None:
        pass
