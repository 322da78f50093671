"""
RSS/Atom feed fetcher producing normalized news items.

A fetch never raises: every failure is logged and reported as an
unsuccessful FetchResult without items, so one broken feed only removes its
own contribution from a request.
"""

import time
from dataclasses import dataclass, field
from typing import Optional

import feedparser
import httpx

from firenews.config import FetcherConfig, get_config
from firenews.core.links import LinkShortener, fix_link
from firenews.core.sources import SourceResolver
from firenews.core.timestamps import TimestampNormalizer
from firenews.core.titles import TitleNormalizer
from firenews.exceptions import FeedFetchError
from firenews.logger import get_logger
from firenews.models.category import FeedSource
from firenews.models.item import NewsItem, RawItem
from firenews.models.registry import SourceRegistry

logger = get_logger(__name__)


@dataclass
class FetchResult:
    """Result of a feed fetch operation."""

    success: bool
    tag: str
    feed_url: str
    items: list[NewsItem] = field(default_factory=list)
    error: Optional[str] = None
    fetch_time_seconds: float = 0.0
    http_status: Optional[int] = None

    def __post_init__(self):
        """Validate fetch result."""
        if self.success and self.error:
            raise ValueError("Successful fetch cannot have an error")
        if not self.success and not self.error:
            self.error = "Unknown error"

    @property
    def items_count(self) -> int:
        return len(self.items)


@dataclass
class FetchStats:
    """Statistics for the fetches of one aggregation request."""

    total_feeds: int = 0
    successful_fetches: int = 0
    failed_fetches: int = 0
    total_items: int = 0
    total_time_seconds: float = 0.0
    errors_by_type: dict = field(default_factory=dict)

    def add_result(self, result: FetchResult) -> None:
        """Add a fetch result to statistics.

        Args:
            result: FetchResult to add
        """
        self.total_feeds += 1
        self.total_time_seconds += result.fetch_time_seconds

        if result.success:
            self.successful_fetches += 1
            self.total_items += result.items_count
        else:
            self.failed_fetches += 1
            error_type = result.error.split(":")[0] if result.error else "unknown"
            self.errors_by_type[error_type] = self.errors_by_type.get(error_type, 0) + 1

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        if self.total_feeds == 0:
            return 0.0
        return self.successful_fetches / self.total_feeds


class FeedFetcher:
    """Fetches one feed and maps its entries to NewsItems."""

    def __init__(
        self,
        registry: SourceRegistry,
        config: Optional[FetcherConfig] = None,
        shortener: Optional[LinkShortener] = None,
        timestamps: Optional[TimestampNormalizer] = None,
        client: Optional[httpx.Client] = None,
    ):
        """Initialize feed fetcher.

        Args:
            registry: Source registry used for publisher resolution and corrections
            config: Fetcher configuration
            shortener: Link shortener; a disabled-by-config one is created if omitted
            timestamps: Timestamp normalizer; built from the pipeline config if omitted
            client: HTTP client to reuse instead of one client per fetch
        """
        app_config = get_config()

        self.registry = registry
        self.config = config or app_config.fetcher
        self.shortener = shortener or LinkShortener(app_config.shortener)
        self.timestamps = timestamps or TimestampNormalizer(
            app_config.pipeline.timezone, registry.time_corrections
        )
        self.titles = TitleNormalizer()
        self.resolver = SourceResolver(registry)
        self._client = client

    def fetch(self, source: FeedSource) -> FetchResult:
        """Fetch a single feed.

        Args:
            source: Feed source with a concrete URL

        Returns:
            FetchResult with items or error
        """
        start_time = time.time()
        url = source.url or ""
        http_status = None

        logger.debug(f"Fetching feed: {source.tag} ({url})")

        try:
            response = self._fetch_http(url)
            http_status = response.status_code
            entries = self._parse(response.content, url)
            items = [self.to_news_item(RawItem.from_entry(entry), source.tag) for entry in entries]

        except httpx.TimeoutException as e:
            error = f"Timeout: {e}"
        except httpx.HTTPStatusError as e:
            http_status = e.response.status_code
            error = f"HTTP {e.response.status_code}: {e}"
        except httpx.HTTPError as e:
            error = f"Request error: {e}"
        except FeedFetchError as e:
            error = f"Parse error: {e}"
        except Exception as e:
            logger.exception(f"Unexpected error fetching {url}")
            error = f"Unexpected error: {type(e).__name__}: {e}"

        else:
            fetch_time = time.time() - start_time
            logger.info(f"Fetched {len(items)} items from {source.tag} in {fetch_time:.2f}s")
            return FetchResult(
                success=True,
                tag=source.tag,
                feed_url=url,
                items=items,
                fetch_time_seconds=fetch_time,
                http_status=http_status,
            )

        logger.warning(f"Failed to fetch and parse the feed {source.tag} ({url}): {error}")
        return FetchResult(
            success=False,
            tag=source.tag,
            feed_url=url,
            error=error,
            fetch_time_seconds=time.time() - start_time,
            http_status=http_status,
        )

    def _fetch_http(self, url: str) -> httpx.Response:
        """Fetch URL with HTTP client.

        Raises:
            httpx.TimeoutException: On timeout
            httpx.HTTPStatusError: On HTTP error
            httpx.RequestError: On network error
        """
        headers = {"User-Agent": self.config.user_agent}

        if self._client is not None:
            response = self._client.get(url, headers=headers, timeout=self.config.timeout_seconds)
            response.raise_for_status()
            return response

        with httpx.Client(
            timeout=self.config.timeout_seconds,
            follow_redirects=self.config.follow_redirects,
            max_redirects=self.config.max_redirects,
        ) as client:
            response = client.get(url, headers=headers)
            response.raise_for_status()
            return response

    @staticmethod
    def _parse(content: bytes, url: str) -> list:
        """Parse feed content with feedparser.

        Raises:
            FeedFetchError: If the document is not a usable feed
        """
        parsed = feedparser.parse(content)
        entries = parsed.get("entries", [])

        if parsed.get("bozo") and not entries:
            exc = parsed.get("bozo_exception")
            raise FeedFetchError(f"Invalid RSS/Atom feed: {url}" + (f" ({exc})" if exc else ""))

        return entries

    def to_news_item(self, raw: RawItem, tag: str) -> NewsItem:
        """Map a raw feed entry to a NewsItem.

        Args:
            raw: Raw entry
            tag: Tag of the feed the entry came from

        Returns:
            NewsItem with status 0
        """
        title, title_hash = self.titles.normalize(raw.title)
        when = self.timestamps.normalize(raw.published, tag, raw.extensions)

        link = fix_link(raw.link, tag, self.registry.link_prefixes)
        shortened = self.shortener.shorten(link)
        resolved = self.resolver.resolve(shortened.long_url or link)

        return NewsItem(
            title=title,
            time=when,
            link=shortened.short_url,
            origin_link=shortened.long_url,
            source=resolved.name,
            source_key=resolved.key,
            tag=tag,
            status=0,
            hash=title_hash,
            description=raw.description or "",
        )
