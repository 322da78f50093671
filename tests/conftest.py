"""Shared fixtures for firenews tests."""

from datetime import datetime, timedelta
from typing import Callable, Optional
from zoneinfo import ZoneInfo

import httpx
import pytest

from firenews.config import Config
from firenews.models import AuthorityPolicy, NewsItem, SourceRegistry

TAIPEI = ZoneInfo("Asia/Taipei")
BASE_TIME = datetime(2017, 3, 1, 12, 0, tzinfo=TAIPEI)


RSS_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>{title}</title>
    <link>https://example.com/</link>
    <description>Sample feed</description>
    <pubDate>Wed, 01 Mar 2017 04:00:00 GMT</pubDate>
    {items}
  </channel>
</rss>
"""

RSS_ITEM_TEMPLATE = """<item>
      <title>{title}</title>
      <link>{link}</link>
      <description>{description}</description>
      <pubDate>{published}</pubDate>
    </item>"""


def build_rss(items: list[dict], title: str = "Sample") -> str:
    """Render an RSS 2.0 document from item dicts (title, link, description, published)."""
    rendered = "\n    ".join(
        RSS_ITEM_TEMPLATE.format(
            title=item.get("title", ""),
            link=item.get("link", ""),
            description=item.get("description", ""),
            published=item.get("published", ""),
        )
        for item in items
    )
    return RSS_TEMPLATE.format(title=title, items=rendered)


@pytest.fixture
def registry() -> SourceRegistry:
    """A small registry covering every classification rule."""
    return SourceRegistry(
        publishers={
            "cna.com.tw": "中央通訊社",
            "chinatimes.com": "中時電子報",
            "appledaily.com.tw": "蘋果日報",
            "ltn.com.tw": "自由時報",
            "udn.com": "聯合新聞網",
            "news.ltn.com.tw": "自由時報電子報",
            "mobile01.com": "Mobile01",
            "example.com": "Example",
        },
        blocked=frozenset({"mobile01.com"}),
        active=frozenset({"ltn.com.tw"}),
        time_corrections={"民眾日報": -14},
        link_prefixes={"大成報": "http://www.greatnews.com.tw/home/"},
        noise_pattern="演習|球賽",
        relevance_pattern="竹市.*消防|消防.*竹市",
        authorities=(
            AuthorityPolicy(name="中央通訊社", action="drop"),
            AuthorityPolicy(name="中時電子報", action="reattribute"),
        ),
    )


@pytest.fixture
def config() -> Config:
    """Default configuration, independent of the global instance."""
    return Config()


@pytest.fixture
def make_item() -> Callable[..., NewsItem]:
    """Factory for NewsItems; ``minutes`` offsets the time from a fixed base."""

    def _make(
        title: str = "新聞標題",
        source: str = "Example",
        link: str = "",
        minutes: int = 0,
        source_key: str = "example.com",
        time: Optional[datetime] = None,
        **kwargs,
    ) -> NewsItem:
        link = link or f"https://example.com/{abs(hash((title, source, minutes)))}"
        return NewsItem(
            title=title,
            time=time or BASE_TIME + timedelta(minutes=minutes),
            link=link,
            origin_link=link,
            source=source,
            source_key=source_key,
            **kwargs,
        )

    return _make


@pytest.fixture
def mock_transport() -> Callable[[dict], httpx.MockTransport]:
    """Build an httpx.MockTransport from a URL -> response mapping.

    Values are response bodies (status 200), ``(status, body)`` tuples, or
    exceptions to raise. Unknown URLs answer 404.
    """

    def _build(routes: dict) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            url = str(request.url)
            if url not in routes:
                return httpx.Response(404, text="not found")
            value = routes[url]
            if isinstance(value, Exception):
                raise value
            if isinstance(value, tuple):
                status, body = value
                return httpx.Response(status, text=body)
            return httpx.Response(200, text=value)

        return httpx.MockTransport(handler)

    return _build


@pytest.fixture
def rss() -> Callable[..., str]:
    """RSS document builder, see ``build_rss``."""
    return build_rss
