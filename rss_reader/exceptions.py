from __future__ import annotations

from typing import Optional


class RSSReaderError(Exception):
    """Base class for every error the library raises on purpose."""


class NetworkError(RSSReaderError):
    """Raised when a required resource cannot be fetched (DNS, connection, non-2xx)."""

    def __init__(self, message: str, *, url: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class FetchTimeoutError(NetworkError):
    """Raised when a request exceeds its timeout."""


class FetchCancelledError(NetworkError):
    """Raised when the caller cancelled before the next request was issued."""


class ParseError(RSSReaderError):
    """Raised when fetched bytes are not an RSS, Atom or JSON Feed document."""


class PersistenceError(RSSReaderError):
    """Raised when the repository refuses or fails a write."""


class NotFoundError(RSSReaderError, KeyError):
    """Raised when a source, article or keyword group id is unknown."""

    def __str__(self) -> str:
        # KeyError quotes its message otherwise
        return str(self.args[0]) if self.args else ""
