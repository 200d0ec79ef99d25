from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

import requests

from .exceptions import FetchCancelledError, FetchTimeoutError, NetworkError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpResponse:
    status_code: int
    content: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)
    url: Optional[str] = None

    @property
    def content_type(self) -> str:
        for k, v in self.headers.items():
            if k.lower() == "content-type":
                return v.lower()
        return ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def text(self, encoding: str = "utf-8") -> str:
        return self.content.decode(encoding, errors="replace")


class HttpClient(Protocol):
    def get(
        self, url: str, *, timeout: float, cancel: Optional[threading.Event] = None
    ) -> HttpResponse:  # pragma: no cover - interface
        """
        GET `url`. Any status code is returned as a response; only transport
        failures raise (NetworkError, FetchTimeoutError, FetchCancelledError).
        """
        ...


def check_cancelled(url: str, cancel: Optional[threading.Event]) -> None:
    if cancel is not None and cancel.is_set():
        raise FetchCancelledError(f"Request cancelled: {url}", url=url)


class RequestsHttpClient:
    """HttpClient backed by a requests.Session."""

    def __init__(self, *, user_agent: str, session: Optional[requests.Session] = None) -> None:
        self._session = session or requests.Session()
        self._headers = {
            "User-Agent": user_agent,
            "Accept": (
                "application/rss+xml, application/atom+xml, application/feed+json, "
                "application/xml;q=0.9, text/html;q=0.8, */*;q=0.5"
            ),
        }

    def get(
        self, url: str, *, timeout: float, cancel: Optional[threading.Event] = None
    ) -> HttpResponse:
        check_cancelled(url, cancel)
        try:
            response = self._session.get(url, headers=self._headers, timeout=timeout, allow_redirects=True)
        except requests.Timeout as e:
            raise FetchTimeoutError(f"Timed out after {timeout}s: {url}", url=url) from e
        except requests.RequestException as e:
            raise NetworkError(f"Failed to fetch {url}: {e}", url=url) from e
        logger.debug("GET %s -> %d", url, response.status_code)
        return HttpResponse(
            status_code=response.status_code,
            content=response.content,
            headers=dict(response.headers),
            url=response.url,
        )

    def close(self) -> None:
        self._session.close()
