"""
Item data models flowing through the aggregation pipeline.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

# Fallback instant for items whose timestamp could not be parsed.
# It is older than any real publication time, so such items sort last.
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

UNKNOWN_SOURCE = "!未知的來源!"


@dataclass
class RawItem:
    """A feed entry as handed over by the feed parser."""

    title: str = ""
    link: str = ""
    published: str = ""
    description: str = ""
    content: str = ""
    extensions: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_entry(cls, entry: dict) -> "RawItem":
        """Build a RawItem from a feedparser entry.

        Args:
            entry: Entry dictionary from feedparser

        Returns:
            RawItem with missing fields as empty strings
        """
        content = entry.get("content") or ""
        if isinstance(content, list):
            content = " ".join(part.get("value", "") for part in content if isinstance(part, dict))

        extensions = {}
        # feedparser maps a missing "updated" to "published" on item access
        if "updated" in entry and entry["updated"]:
            extensions["updated"] = entry["updated"]

        return cls(
            title=entry.get("title") or "",
            link=entry.get("link") or "",
            published=entry.get("published") or "",
            description=entry.get("description") or entry.get("summary") or "",
            content=content,
            extensions=extensions,
        )


@dataclass
class NewsItem:
    """A normalized news item.

    Created by the fetcher, then deduplicated, classified and sorted in place.
    """

    title: str
    time: datetime
    link: str
    origin_link: str
    source: str = UNKNOWN_SOURCE
    source_key: str = ""
    tag: str = ""
    status: int = 0
    hash: int = 0
    description: str = ""

    @property
    def time_text(self) -> str:
        """Clock time of publication, e.g. ``"15:04"``."""
        return self.time.strftime("%H:%M")

    @property
    def has_time(self) -> bool:
        """Whether the item carries a parsed timestamp."""
        return self.time != ZERO_TIME


@dataclass
class SocialPost:
    """A post from a social network page or group feed."""

    gid: str
    pid: str
    message: str
    story: str
    time: datetime
    link: str
    origin_link: str
    source: str

    @property
    def time_text(self) -> str:
        """Clock time of the post, e.g. ``"15:04"``."""
        return self.time.strftime("%H:%M")
