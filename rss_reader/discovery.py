from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from .exceptions import FetchCancelledError, NetworkError, RSSReaderError
from .http import HttpClient

logger = logging.getLogger(__name__)

FEED_LINK_TYPES = frozenset({
    "application/rss+xml",
    "application/atom+xml",
    "application/feed+json",
})
FEED_LINK_RELS = frozenset({"alternate", "feed"})

# Probed in this order; hits are reported in the same order.
WELL_KNOWN_FEED_PATHS: Tuple[str, ...] = (
    "/feed",
    "/rss",
    "/feed.xml",
    "/rss.xml",
    "/atom.xml",
    "/index.xml",
    "/feed/",
    "/rss/",
    "/feeds/posts/default",
    "/blog/feed",
    "/blog/rss",
    "/blog/atom",
)

_FEED_CONTENT_TYPE_HINTS = ("xml", "rss", "atom")


def _dedupe(urls: List[str]) -> List[str]:
    seen = set()
    out = []
    for u in urls:
        if u in seen:
            continue
        seen.add(u)
        out.append(u)
    return out


def find_feed_links(html: str, page_url: str) -> List[str]:
    """
    Collect <link rel="alternate" type="application/rss+xml|atom+xml" href>
    targets from an HTML document, resolved against `page_url` (or the
    document's <base href>), in document order without duplicates.
    Attribute order does not matter.
    """
    soup = BeautifulSoup(html, "html.parser")
    base = soup.find("base", href=True)
    if base is not None and base["href"].strip():
        page_url = urljoin(page_url, base["href"].strip())
    found = []
    for link in soup.find_all("link", href=True):
        rel = link.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        if not FEED_LINK_RELS.intersection(r.lower() for r in rel):
            continue
        mime = (link.get("type") or "").split(";")[0].strip().lower()
        if mime not in FEED_LINK_TYPES:
            continue
        href = link["href"].strip()
        if href:
            found.append(urljoin(page_url, href))
    return _dedupe(found)


def site_root(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


class FeedDiscoverer:
    """
    Find feed URLs for a website.

    Phase 1 scans the page's <link> tags. Only when that finds nothing does
    phase 2 probe WELL_KNOWN_FEED_PATHS concurrently; a failing probe counts
    as a miss and never aborts the others.
    """

    def __init__(
        self,
        http: HttpClient,
        *,
        timeout: float = 15.0,
        max_workers: int = 6,
        paths: Tuple[str, ...] = WELL_KNOWN_FEED_PATHS,
    ) -> None:
        self.http = http
        self.timeout = timeout
        self.max_workers = max(1, max_workers)
        self.paths = paths

    def discover(self, website_url: str, cancel: Optional[threading.Event] = None) -> List[str]:
        """
        Return candidate feed URLs, most confident first.

        Raises NetworkError only when the page itself cannot be fetched.
        """
        response = self.http.get(website_url, timeout=self.timeout, cancel=cancel)
        if not response.ok:
            raise NetworkError(
                f"Website returned HTTP {response.status_code}: {website_url}",
                url=website_url,
                status_code=response.status_code,
            )

        # Relative hrefs resolve against the page actually served after redirects.
        page_url = response.url or website_url
        feeds = find_feed_links(response.text(), page_url)
        if feeds:
            logger.info("Found %d feed link(s) in %s", len(feeds), website_url)
            return feeds

        logger.info("No feed links in %s; probing %d well-known paths", website_url, len(self.paths))
        return self.probe_well_known_paths(page_url, cancel=cancel)

    def probe_well_known_paths(self, website_url: str, cancel: Optional[threading.Event] = None) -> List[str]:
        root = site_root(website_url)
        candidates = _dedupe([urljoin(root, path) for path in self.paths])
        if not candidates:
            return []

        def _probe(url: str) -> bool:
            return self._is_feed(url, cancel)

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(candidates))) as ex:
            hits = list(ex.map(_probe, candidates))

        found = [url for url, hit in zip(candidates, hits) if hit]
        logger.info("Well-known path probing found %d feed(s) for %s", len(found), root)
        return found

    def _is_feed(self, url: str, cancel: Optional[threading.Event]) -> bool:
        try:
            response = self.http.get(url, timeout=self.timeout, cancel=cancel)
        except FetchCancelledError:
            raise
        except RSSReaderError as e:
            logger.debug("Probe failed for %s: %s", url, e)
            return False
        if response.status_code != 200:
            logger.debug("Probe miss for %s: HTTP %d", url, response.status_code)
            return False
        ctype = response.content_type
        return any(hint in ctype for hint in _FEED_CONTENT_TYPE_HINTS)
