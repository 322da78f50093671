"""
Title cleaning and identity hashing.
"""

from html import unescape
from typing import Optional

from bs4 import BeautifulSoup

ELLIPSIS_MARKERS = ("...", "…")

_FNV32_OFFSET_BASIS = 0x811C9DC5
_FNV32_PRIME = 0x01000193


def fnv1a_32(text: str) -> int:
    """32-bit FNV-1a hash of the UTF-8 encoding of ``text``."""
    value = _FNV32_OFFSET_BASIS
    for byte in text.encode("utf-8"):
        value ^= byte
        value = (value * _FNV32_PRIME) & 0xFFFFFFFF
    return value


def sanitize_html(text: Optional[str]) -> str:
    """Strip markup and unescape entities, leaving plain text.

    Args:
        text: Text that may contain HTML tags or entities

    Returns:
        Plain text
    """
    if not text:
        return ""

    text = unescape(text)
    if "<" in text:
        soup = BeautifulSoup(text, "html.parser")
        for element in soup(["script", "style", "noscript"]):
            element.decompose()
        text = soup.get_text()

    return text


def canonical_title(title: str) -> str:
    """Remove all whitespace and a trailing ellipsis.

    Feeds pad and wrap the same headline differently; comparing titles in
    this form lets duplicates from different publishers match exactly.
    Applying it twice gives the same result as applying it once.
    """
    title = "".join(ch for ch in title if not ch.isspace())
    trimmed = True
    while trimmed:
        trimmed = False
        for marker in ELLIPSIS_MARKERS:
            if title.endswith(marker):
                title = title[: -len(marker)]
                trimmed = True
    return title


class TitleNormalizer:
    """Turns raw feed titles into display titles plus an identity hash."""

    def normalize(self, raw_title: Optional[str]) -> tuple[str, int]:
        """Normalize a raw title.

        The hash is taken over the sanitized text before whitespace removal.

        Args:
            raw_title: Title as published, possibly containing markup

        Returns:
            Tuple of (canonical title, FNV-1a 32-bit hash)
        """
        sanitized = sanitize_html(raw_title)
        return canonical_title(sanitized), fnv1a_32(sanitized)
