from __future__ import annotations

import logging
import threading
from typing import Optional

from .exceptions import NetworkError
from .http import HttpClient
from .models import ParsedDocument
from .parser import parse_feed

logger = logging.getLogger(__name__)


def fetch_feed(
    url: str,
    http: HttpClient,
    *,
    timeout: float,
    cancel: Optional[threading.Event] = None,
) -> ParsedDocument:
    """
    Fetch a single feed URL and return its parsed document.

    Raises NetworkError (or FetchTimeoutError) when the feed cannot be
    retrieved, including non-2xx responses, and ParseError when the body is
    not a recognised feed.
    """
    response = http.get(url, timeout=timeout, cancel=cancel)
    if not response.ok:
        raise NetworkError(
            f"Feed request returned HTTP {response.status_code}: {url}",
            url=url,
            status_code=response.status_code,
        )
    document = parse_feed(response.content, response.content_type)
    logger.debug("Fetched %s feed with %d entries from %s", document.variant.value, len(document.entries), url)
    return document
