"""HTML helpers shared by the normalizer and keyword extraction."""
from __future__ import annotations

import re
from typing import Optional

from bs4 import BeautifulSoup


def clean_text(html: Optional[str]) -> Optional[str]:
    """Strip HTML tags, unescape entities and collapse whitespace."""
    if not html:
        return None
    if "<" in html or "&" in html:
        text = BeautifulSoup(html, "html.parser").get_text(separator=" ")
    else:
        text = html
    text = re.sub(r"\s+", " ", text).strip()
    return text if text else None


def first_image_src(html: Optional[str]) -> Optional[str]:
    """Return the src of the first <img> carrying a non-empty src, if any."""
    if not html or "<img" not in html.lower():
        return None
    soup = BeautifulSoup(html, "html.parser")
    for img in soup.find_all("img"):
        src = (img.get("src") or "").strip()
        if src:
            return src
    return None


def truncate(text: str, limit: int) -> str:
    if limit <= 0 or len(text) <= limit:
        return text
    return text[:limit].rstrip()
