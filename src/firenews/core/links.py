"""
Article link repair, unwrapping and shortening.
"""

import threading
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import unquote_plus

import httpx

from firenews.config import ShortenerConfig, get_config
from firenews.logger import get_logger

logger = get_logger(__name__)

RELATIVE_LINK_PREFIX = "news_pagein.php?"


def fix_link(link: str, tag: str, prefixes: Optional[Mapping[str, str]] = None) -> str:
    """Repair links some feeds publish in a broken form.

    Args:
        link: Link as published
        tag: Feed tag, selects the base URL for relative links
        prefixes: Feed tag -> base URL

    Returns:
        Repaired link
    """
    if link.startswith(RELATIVE_LINK_PREFIX) and prefixes and tag in prefixes:
        link = prefixes[tag] + link

    if link.endswith("//"):
        link = link[:-1]

    return link


def clean_url(link: str) -> str:
    """Unwrap a redirect link and percent-decode it.

    Google Alerts links point at a redirector carrying the target as
    ``&url=<target>&ct=...``; the target is returned in that case.
    """
    parts = link.split("&url=")
    if len(parts) == 2:
        inner = parts[1].split("&ct=")
        if len(inner) == 2:
            link = inner[0]

    return unquote_plus(link)


@dataclass
class ShortenResult:
    """Result of a shortening call.

    ``short_url`` always holds a usable link: the canonical long URL when
    shortening is disabled or failed.
    """

    short_url: str
    long_url: str
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


class LinkShortener:
    """Client for a URL shortening service."""

    def __init__(
        self,
        config: Optional[ShortenerConfig] = None,
        client: Optional[httpx.Client] = None,
    ):
        """Initialize link shortener.

        Args:
            config: Shortener configuration
            client: HTTP client to reuse; one is created on first use otherwise
        """
        self.config = config or get_config().shortener
        self._client = client
        self._client_lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def _get_client(self) -> httpx.Client:
        # Fetch workers share one shortener
        with self._client_lock:
            if self._client is None:
                self._client = httpx.Client(timeout=self.config.timeout_seconds)
            return self._client

    def shorten(self, link: str) -> ShortenResult:
        """Shorten a link.

        The link is unwrapped and decoded first. Failures never raise; they
        are logged and the canonical long URL is used instead.

        Args:
            link: Article link as published

        Returns:
            ShortenResult
        """
        long_url = clean_url(link)

        if not self.enabled or not long_url:
            return ShortenResult(short_url=long_url, long_url=long_url)

        params = {"key": self.config.api_key} if self.config.api_key else None

        try:
            response = self._get_client().post(
                self.config.endpoint,
                params=params,
                json={"longUrl": long_url},
            )
            response.raise_for_status()
            data = response.json()
            short_url = data.get("id") if isinstance(data, dict) else None
            if not short_url:
                raise ValueError("response has no 'id'")
        except (httpx.HTTPError, ValueError) as e:
            error = f"{type(e).__name__}: {e}"
            logger.warning(f"Failed to shorten {long_url}: {error}")
            return ShortenResult(short_url=long_url, long_url=long_url, error=error)

        return ShortenResult(short_url=short_url, long_url=long_url)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        with self._client_lock:
            if self._client is not None:
                self._client.close()
                self._client = None
