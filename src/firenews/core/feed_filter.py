"""
Regex filtering proxy for RSS/Atom feeds.

Fetches an upstream feed, keeps the entries matching an include pattern and
re-serializes them as RSS 2.0. Categories route publishers' section feeds
through it so only topical entries reach the aggregation pipeline.

For CAP alert feeds (``data_type="cap"``) each kept entry links to a CAP
document; the emitted item takes its title from the second resource URI and
its link from ``info/web`` of that document.
"""

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Mapping, Optional

import feedparser
import httpx
from feedgen.feed import FeedGenerator

from firenews.config import FetcherConfig, get_config
from firenews.core.classifier import cjk_normalize
from firenews.exceptions import FeedFilterError, InvalidPatternError
from firenews.logger import get_logger
from firenews.models.item import RawItem

logger = get_logger(__name__)

CAP_DATA_TYPE = "cap"


def compile_include(include: Optional[str]) -> re.Pattern:
    """Compile a caller-supplied include pattern.

    Raises:
        InvalidPatternError: If the pattern does not compile
    """
    try:
        return re.compile(include or "")
    except re.error as e:
        raise InvalidPatternError(f"Invalid include pattern {include!r}: {e}") from e


def _struct_to_datetime(value) -> Optional[datetime]:
    """feedparser's UTC ``time.struct_time`` to an aware datetime."""
    if not value:
        return None
    return datetime(*value[:6], tzinfo=timezone.utc)


def _published_or_updated(element) -> Optional[datetime]:
    """Publication time of a feed or entry, else its update time."""
    if element.get("published_parsed"):
        return _struct_to_datetime(element["published_parsed"])
    if "updated_parsed" in element:
        return _struct_to_datetime(element["updated_parsed"])
    return None


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _children(element: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in element if _local_name(child.tag) == name]


def _child_text(element: ET.Element, name: str) -> str:
    for child in _children(element, name):
        return (child.text or "").strip()
    return ""


@dataclass
class CapSummary:
    """The parts of a CAP alert used for the filtered feed."""

    web: str
    resource_uris: list[str]


def parse_cap(document: bytes) -> CapSummary:
    """Extract ``info/web`` and ``info/resource/uri`` from a CAP alert.

    Namespace-agnostic, so CAP 1.1 and 1.2 documents both work.

    Raises:
        ET.ParseError: If the document is not XML
    """
    root = ET.fromstring(document)
    web = ""
    uris = []
    for info in _children(root, "info"):
        web = web or _child_text(info, "web")
        for resource in _children(info, "resource"):
            uris.append(_child_text(resource, "uri"))
    return CapSummary(web=web, resource_uris=uris)


class FeedFilter:
    """Filters an upstream feed by a regular expression."""

    def __init__(
        self,
        config: Optional[FetcherConfig] = None,
        client: Optional[httpx.Client] = None,
        replacements: Optional[Mapping[str, str]] = None,
    ):
        """Initialize feed filter.

        Args:
            config: Fetcher configuration (timeout, user agent, redirects)
            client: HTTP client to reuse instead of one client per call
            replacements: CJK look-alike replacements applied before matching
        """
        self.config = config or get_config().fetcher
        self.replacements = replacements
        self._client = client

    def _get(self, url: str) -> bytes:
        headers = {"User-Agent": self.config.user_agent}
        if self._client is not None:
            response = self._client.get(url, headers=headers, timeout=self.config.timeout_seconds)
            response.raise_for_status()
            return response.content

        with httpx.Client(
            timeout=self.config.timeout_seconds,
            follow_redirects=self.config.follow_redirects,
            max_redirects=self.config.max_redirects,
        ) as client:
            response = client.get(url, headers=headers)
            response.raise_for_status()
            return response.content

    def matches(self, pattern: re.Pattern, raw: RawItem) -> bool:
        """Whether the include pattern matches title, description or content."""
        for text in (raw.title, raw.description, raw.content):
            if pattern.search(cjk_normalize(text, self.replacements)):
                return True
        return False

    def filter_feed(self, url: str, include: Optional[str] = None, data_type: Optional[str] = None) -> str:
        """Fetch a feed and keep only matching entries.

        Args:
            url: Upstream feed URL
            include: Regular expression; empty keeps every entry
            data_type: ``"cap"`` for CAP alert feeds

        Returns:
            RSS 2.0 document

        Raises:
            InvalidPatternError: If ``include`` is not a valid pattern
            FeedFilterError: If the upstream feed cannot be fetched or parsed
        """
        pattern = compile_include(include)

        try:
            content = self._get(url)
        except httpx.HTTPError as e:
            raise FeedFilterError(f"Failed to fetch {url}: {type(e).__name__}: {e}") from e

        parsed = feedparser.parse(content)
        entries = parsed.get("entries", [])
        if parsed.get("bozo") and not entries:
            raise FeedFilterError(f"Invalid RSS/Atom feed: {url} ({parsed.get('bozo_exception')})")

        feed = parsed.get("feed", {})
        fg = FeedGenerator()
        fg.title(feed.get("title") or url)
        fg.link(href=feed.get("link") or url, rel="alternate")
        fg.description(feed.get("description") or feed.get("subtitle") or feed.get("title") or url)

        created = _published_or_updated(feed)
        if created is not None:
            fg.pubDate(created)
        author = feed.get("author_detail") or {}
        if author.get("name"):
            fg.author({key: author[key] for key in ("name", "email") if author.get(key)})

        kept = 0
        for entry in entries:
            raw = RawItem.from_entry(entry)
            if not self.matches(pattern, raw):
                continue

            title, link = raw.title, raw.link
            if data_type == CAP_DATA_TYPE:
                title, link = self._cap_title_and_link(raw)

            fe = fg.add_entry(order="append")
            fe.title(title or "(untitled)")
            if link:
                fe.link(href=link)
            if raw.description:
                fe.description(raw.description)
            when = _published_or_updated(entry)
            if when is not None:
                fe.pubDate(when)
            kept += 1

        logger.info(f"Filtered {url}: kept {kept} of {len(entries)} entries")
        return fg.rss_str(pretty=True).decode("utf-8")

    def _cap_title_and_link(self, raw: RawItem) -> tuple[str, str]:
        """Title and link of a CAP alert entry.

        Entries whose CAP document cannot be loaded keep their own title and
        link.
        """
        try:
            cap = parse_cap(self._get(raw.link))
        except (httpx.HTTPError, ET.ParseError) as e:
            logger.warning(f"Failed to load CAP document {raw.link}: {type(e).__name__}: {e}")
            return raw.title, raw.link

        if len(cap.resource_uris) < 2:
            logger.warning(f"CAP document {raw.link} has {len(cap.resource_uris)} resource(s)")
            return raw.title, cap.web or raw.link

        return cap.resource_uris[1], cap.web or raw.link
