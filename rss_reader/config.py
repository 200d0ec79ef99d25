from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from dotenv import load_dotenv

T = TypeVar("T")

_ENV_PREFIX = "RSS_READER_"


@dataclass
class Settings:
    http_timeout: float = 15.0
    user_agent: str = "rss-reader/1.0 (+feed discovery)"
    discovery_workers: int = 6
    ingest_workers: int = 4
    max_keywords: int = 10
    keyword_cache_size: int = 1024
    title_fallback_chars: int = 60
    extension_ratio: float = 1.5
    log_level: str = "INFO"


def _env(name: str, default: T, cast: Callable[[str], T]) -> T:
    key = _ENV_PREFIX + name
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError as e:
        raise ValueError(f"Invalid value for {key}: {raw!r}") from e


def load_settings(dotenv_path: Optional[str] = None) -> Settings:
    """
    Build Settings from a .env file (if present) and RSS_READER_* environment
    variables. Variables already set in the environment win over .env.
    """
    load_dotenv(dotenv_path)
    defaults = Settings()
    return Settings(
        http_timeout=_env("HTTP_TIMEOUT", defaults.http_timeout, float),
        user_agent=_env("USER_AGENT", defaults.user_agent, str),
        discovery_workers=_env("DISCOVERY_WORKERS", defaults.discovery_workers, int),
        ingest_workers=_env("INGEST_WORKERS", defaults.ingest_workers, int),
        max_keywords=_env("MAX_KEYWORDS", defaults.max_keywords, int),
        keyword_cache_size=_env("KEYWORD_CACHE_SIZE", defaults.keyword_cache_size, int),
        title_fallback_chars=defaults.title_fallback_chars,
        extension_ratio=defaults.extension_ratio,
        log_level=_env("LOG_LEVEL", defaults.log_level, str).upper(),
    )
