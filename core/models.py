"""Event and value types flowing between the presentation surface and the view model.

Input and Output are closed sets of variants. Each variant is a frozen
dataclass and the module-level ``Input``/``Output`` aliases name the union so
callers can dispatch with ``isinstance`` over a known, finite list.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union


class FetchError(Exception):
    """Opaque failure of a quote fetch (transport or payload decode).

    ``description`` is the human-readable text shown to the user; ``cause``
    keeps the underlying exception when there is one.
    """

    def __init__(self, description: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(description)
        self.description = description
        self.cause = cause

    @classmethod
    def wrap(cls, exc: BaseException, prefix: Optional[str] = None) -> 'FetchError':
        if isinstance(exc, FetchError):
            return exc
        text = str(exc) or type(exc).__name__
        if prefix:
            text = f"{prefix}: {text}"
        return cls(text, cause=exc)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, FetchError):
            return NotImplemented
        return self.description == other.description

    def __hash__(self) -> int:
        return hash(self.description)

    def __repr__(self) -> str:
        return f"FetchError({self.description!r})"


@dataclass(frozen=True)
class Quote:
    """A quote as returned by the remote endpoint."""

    content: str
    author: str

    @classmethod
    def from_payload(cls, payload: Any) -> 'Quote':
        """Decode a JSON object; keys other than content/author are ignored."""
        if not isinstance(payload, dict):
            raise FetchError(f"Invalid quote payload: expected an object, got {type(payload).__name__}")
        content = payload.get('content')
        author = payload.get('author')
        missing = [k for k, v in (('content', content), ('author', author)) if not isinstance(v, str)]
        if missing:
            raise FetchError(f"Invalid quote payload: missing or non-string {', '.join(missing)}")
        return cls(content=content, author=author)

    def to_dict(self) -> Dict[str, str]:
        return {'content': self.content, 'author': self.author}


# --- Input ----------------------------------------------------------------

@dataclass(frozen=True)
class ViewAppeared:
    """The screen became visible."""


@dataclass(frozen=True)
class RefreshRequested:
    """The refresh control was activated."""


Input = Union[ViewAppeared, RefreshRequested]
INPUT_TYPES = (ViewAppeared, RefreshRequested)


# --- Output ---------------------------------------------------------------

@dataclass(frozen=True)
class FetchFailed:
    error: FetchError


@dataclass(frozen=True)
class FetchSucceeded:
    quote: Quote


@dataclass(frozen=True)
class RefreshEnabled:
    enabled: bool


Output = Union[FetchFailed, FetchSucceeded, RefreshEnabled]
OUTPUT_TYPES = (FetchFailed, FetchSucceeded, RefreshEnabled)


def event_name(event: Any) -> str:
    """Short name used in logs and console traces."""
    return type(event).__name__


def describe_event(event: Any) -> Dict[str, Any]:
    """Flatten an Input/Output event into a loggable dict."""
    data: Dict[str, Any] = {'event': event_name(event)}
    if isinstance(event, RefreshEnabled):
        data['enabled'] = event.enabled
    elif isinstance(event, FetchSucceeded):
        data['quote'] = event.quote.to_dict()
    elif isinstance(event, FetchFailed):
        data['error'] = event.error.description
    return data


__all__ = [
    'FetchError',
    'Quote',
    'ViewAppeared',
    'RefreshRequested',
    'Input',
    'INPUT_TYPES',
    'FetchFailed',
    'FetchSucceeded',
    'RefreshEnabled',
    'Output',
    'OUTPUT_TYPES',
    'event_name',
    'describe_event',
]
