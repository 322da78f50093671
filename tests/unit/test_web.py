"""Unit tests for the web API."""

from unittest.mock import Mock

import pytest

from firenews.core.feed_filter import FeedFilter
from firenews.core.fetcher import FeedFetcher, FetchResult
from firenews.core.pipeline import NewsAggregator
from firenews.core.social import SocialFeedClient
from firenews.exceptions import FeedFilterError, SocialFeedError
from firenews.models import Category, CategoryCatalog, FeedSource, SocialPost
from firenews.web import create_app


@pytest.fixture
def items(make_item):
    return [
        make_item("竹市消防局搶救受困民眾", source="自由時報", source_key="ltn.com.tw", minutes=10),
        make_item("台北市火警", minutes=0),
    ]


@pytest.fixture
def fetcher(items):
    fetcher = Mock(spec=FeedFetcher)
    fetcher.fetch.side_effect = lambda source: FetchResult(
        success=True, tag=source.tag, feed_url=source.url, items=list(items)
    )
    return fetcher


@pytest.fixture
def catalog():
    return CategoryCatalog([
        Category(name="main", description="全國消防新聞", sources=(FeedSource(tag="消防", url="https://feeds.example.com/1"),)),
        Category(name="hcfdrss", include="", sources=(FeedSource(tag="爆料公社", filter_url="http://blog.example.com/feeds"),)),
    ])


@pytest.fixture
def feed_filter():
    return Mock(spec=FeedFilter)


@pytest.fixture
def social_client():
    return Mock(spec=SocialFeedClient)


@pytest.fixture
def make_app(registry, config, catalog, fetcher, feed_filter, social_client):
    def _make(config=config):
        aggregator = NewsAggregator(registry, catalog, config=config, fetcher=fetcher)
        app = create_app(config, aggregator=aggregator, feed_filter=feed_filter, social_client=social_client)
        app.config["TESTING"] = True
        return app

    return _make


@pytest.fixture
def client(make_app):
    return make_app().test_client()


class TestNewsApi:
    """Tests for /api/news/v1."""

    def test_category(self, client):
        """Test a category answers its items newest first."""
        response = client.get("/api/news/v1/main")

        assert response.status_code == 200
        news = response.get_json()["news"]
        assert [n["title"] for n in news] == ["竹市消防局搶救受困民眾", "台北市火警"]
        assert news[0]["status"] == 1
        assert news[1]["status"] == 0
        assert news[0]["timeText"] == "12:10"
        assert set(news[0]) == {
            "title", "timeText", "time", "link", "originLink", "source", "tag", "status", "hash", "description",
        }

    def test_cjk_not_escaped(self, client):
        """Test CJK text is sent as UTF-8, not as escapes."""
        response = client.get("/api/news/v1/main")

        assert "竹市".encode("utf-8") in response.data

    def test_unknown_category(self, client):
        """Test an unknown category is a 404 with the error envelope."""
        response = client.get("/api/news/v1/nope")

        assert response.status_code == 404
        assert "nope" in response.get_json()["error"]

    def test_source_key_exposed(self, make_app, config):
        """Test sourceKey is included when configured."""
        config.web.expose_source_key = True
        client = make_app(config).test_client()

        news = client.get("/api/news/v1/main").get_json()["news"]

        assert news[0]["sourceKey"] == "ltn.com.tw"

    def test_failing_feeds_still_200(self, make_app, fetcher):
        """Test a request whose feeds fail answers 200 with no news."""
        fetcher.fetch.side_effect = lambda source: FetchResult(success=False, tag=source.tag, feed_url=source.url)

        response = make_app().test_client().get("/api/news/v1/main")

        assert response.status_code == 200
        assert response.get_json() == {"news": []}

    def test_cors_header(self, client):
        """Test API responses allow cross-origin reads."""
        response = client.get("/api/news/v1/main")

        assert response.headers["Access-Control-Allow-Origin"] == "*"


class TestBloggerApi:
    """Tests for /api/blogger/v1."""

    def test_include_passed_to_filtered_sources(self, client, fetcher):
        """Test the caller include pattern is routed to the filter endpoint."""
        response = client.get("/api/blogger/v1/feed/hcfdrss", query_string={"include": "火警"})

        assert response.status_code == 200
        source = fetcher.fetch.call_args[0][0]
        assert "include=%E7%81%AB%E8%AD%A6" in source.url

    def test_invalid_include(self, client):
        """Test a malformed include pattern is a 400."""
        response = client.get("/api/blogger/v1/feed/hcfdrss", query_string={"include": "火警("})

        assert response.status_code == 400
        assert "error" in response.get_json()


class TestFilterApi:
    """Tests for /api/util/v1/filter."""

    def test_returns_rss(self, client, feed_filter):
        """Test the filtered feed is returned as RSS."""
        feed_filter.filter_feed.return_value = "<rss version=\"2.0\"></rss>"

        response = client.get(
            "/api/util/v1/filter",
            query_string={"url": "http://a/rss", "include": "消防", "type": "cap"},
        )

        assert response.status_code == 200
        assert response.mimetype == "application/rss+xml"
        assert response.data == b"<rss version=\"2.0\"></rss>"
        feed_filter.filter_feed.assert_called_once_with("http://a/rss", include="消防", data_type="cap")

    def test_missing_url(self, client):
        """Test the url parameter is required."""
        response = client.get("/api/util/v1/filter")

        assert response.status_code == 400

    def test_upstream_failure(self, client, feed_filter):
        """Test upstream failures are a 502 with the error envelope."""
        feed_filter.filter_feed.side_effect = FeedFilterError("upstream down")

        response = client.get("/api/util/v1/filter", query_string={"url": "http://a/rss"})

        assert response.status_code == 502
        assert response.get_json() == {"error": "upstream down"}


class TestSocialApi:
    """Tests for /api/facebook/v1."""

    def test_feed(self, client, social_client, make_item):
        """Test matching posts are returned under "fb"."""
        post = SocialPost(
            gid="1", pid="2", message="竹市消防", story="", time=make_item().time,
            link="https://fb/1_2", origin_link="https://fb/1_2", source="新竹市消防局",
        )
        social_client.list_posts.return_value = [post]
        social_client.filter_posts.return_value = [post]

        response = client.get("/api/facebook/v1/feed/1", query_string={"include": "消防", "type": "pg"})

        assert response.status_code == 200
        fb = response.get_json()["fb"]
        assert fb[0]["pid"] == "2"
        assert fb[0]["source"] == "新竹市消防局"
        social_client.list_posts.assert_called_once_with("1", "pg")
        social_client.filter_posts.assert_called_once_with([post], "消防")

    def test_graph_failure(self, client, social_client):
        """Test Graph API failures are a 502."""
        social_client.list_posts.side_effect = SocialFeedError("Graph error")

        assert client.get("/api/facebook/v1/feed/1").status_code == 502


class TestSystemApi:
    """Tests for service metadata routes."""

    def test_categories(self, client):
        """Test configured categories are listed."""
        categories = client.get("/api/categories").get_json()["categories"]

        assert [c["name"] for c in categories] == ["main", "hcfdrss"]
        assert categories[0]["description"] == "全國消防新聞"

    def test_healthz(self, client):
        """Test the health check."""
        response = client.get("/healthz")

        assert response.status_code == 200
        assert response.get_json()["status"] == "ok"

    def test_unknown_route(self, client):
        """Test unknown routes use the error envelope."""
        response = client.get("/nope")

        assert response.status_code == 404
        assert "error" in response.get_json()
