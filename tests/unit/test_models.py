"""Unit tests for data models and static data loading."""

import warnings

import feedparser
import pytest
from pydantic import ValidationError

from firenews.exceptions import ConfigurationError, UnknownCategoryError
from firenews.models import (
    ZERO_TIME,
    AuthorityPolicy,
    Category,
    FeedSource,
    NewsItem,
    RawItem,
    SourceRegistry,
    load_categories,
    load_registry,
)

BASE = "http://localhost:1234/api/util/v1/"


class TestRawItem:
    """Tests for RawItem.from_entry."""

    def test_from_entry(self):
        """Test feedparser entry fields are mapped."""
        entry = {
            "title": "火警",
            "link": "http://a/1",
            "published": "Wed, 01 Mar 2017 04:00:00 GMT",
            "summary": "摘要",
            "content": [{"value": "內文一"}, {"value": "內文二"}],
            "updated": "2017-03-01T04:00:00Z",
        }

        raw = RawItem.from_entry(entry)

        assert raw.title == "火警"
        assert raw.description == "摘要"
        assert raw.content == "內文一 內文二"
        assert raw.extensions == {"updated": "2017-03-01T04:00:00Z"}

    def test_missing_fields(self):
        """Test missing fields become empty strings."""
        raw = RawItem.from_entry({})

        assert (raw.title, raw.link, raw.published, raw.description, raw.content) == ("", "", "", "", "")

    def test_parsed_rss_has_no_updated(self, rss):
        """Test a published-only entry does not get its date copied into updated."""
        body = rss([{"title": "t", "link": "http://a/1", "published": "Wed, 01 Mar 2017 04:00:00 GMT"}])
        entry = feedparser.parse(body).entries[0]

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            raw = RawItem.from_entry(entry)

        assert raw.extensions == {}
        assert raw.published == "Wed, 01 Mar 2017 04:00:00 GMT"
        assert not [w for w in caught if "updated" in str(w.message)]

    def test_parsed_atom_updated(self):
        """Test an Atom update time is carried as the updated extension."""
        atom = (
            '<feed xmlns="http://www.w3.org/2005/Atom"><title>A</title>'
            "<entry><title>t</title><updated>2017-03-01T04:00:00Z</updated></entry></feed>"
        )

        raw = RawItem.from_entry(feedparser.parse(atom).entries[0])

        assert raw.published == ""
        assert raw.extensions == {"updated": "2017-03-01T04:00:00Z"}


class TestNewsItem:
    """Tests for NewsItem."""

    def test_defaults(self):
        """Test a new item is unflagged and unattributed."""
        item = NewsItem(title="t", time=ZERO_TIME, link="l", origin_link="l")

        assert item.status == 0
        assert item.source == "!未知的來源!"
        assert not item.has_time


class TestSourceRegistry:
    """Tests for SourceRegistry validation and loading."""

    def test_blocked_must_be_registered(self):
        """Test unknown blocked keys are rejected."""
        with pytest.raises(ValidationError):
            SourceRegistry(publishers={"a.tw": "A"}, blocked=frozenset({"b.tw"}))

    def test_invalid_pattern(self):
        """Test a noise pattern that does not compile is rejected."""
        with pytest.raises(ValidationError):
            SourceRegistry(noise_pattern="(")

    def test_immutable(self, registry):
        """Test the registry cannot be modified."""
        with pytest.raises(ValidationError):
            registry.noise_pattern = "x"

    def test_credited_name(self):
        """Test the credited publisher defaults to the authority itself."""
        assert AuthorityPolicy(name="中時電子報").credited_name == "中時電子報"
        assert AuthorityPolicy(name="中時電子報", credit_to="中央通訊社").credited_name == "中央通訊社"

    def test_load_packaged(self):
        """Test the packaged registry loads."""
        registry = load_registry()

        assert registry.publishers["cna.com.tw"] == "中央通訊社"
        assert [a.name for a in registry.authorities] == ["中央通訊社", "中時電子報"]
        assert registry.time_corrections["大成報"] == -8

    def test_load_missing(self, tmp_path):
        """Test a missing registry file is a configuration error."""
        with pytest.raises(ConfigurationError):
            load_registry(tmp_path / "missing.yaml")

    def test_load_invalid(self, tmp_path):
        """Test an invalid registry file is a configuration error."""
        path = tmp_path / "registry.yaml"
        path.write_text("publishers: {a.tw: A}\nblocked: [b.tw]\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_registry(path)


class TestFeedSource:
    """Tests for FeedSource."""

    def test_needs_exactly_one_target(self):
        """Test url and filter_url are mutually exclusive and one is required."""
        with pytest.raises(ValidationError):
            FeedSource(tag="t")
        with pytest.raises(ValidationError):
            FeedSource(tag="t", url="http://a", filter_url="http://b")

    def test_direct_source_unchanged(self):
        """Test direct sources resolve to themselves."""
        source = FeedSource(tag="t", url="http://a/rss")

        assert source.resolve(BASE) is source

    def test_filtered_source(self):
        """Test filtered sources resolve to the filter endpoint."""
        source = FeedSource(tag="t", filter_url="http://udn.com/udnrss/social.xml", include="消防|火警")

        resolved = source.resolve(BASE)

        assert resolved.url == (
            BASE + "filter?url=http%3A%2F%2Fudn.com%2Fudnrss%2Fsocial.xml"
            "&include=%E6%B6%88%E9%98%B2%7C%E7%81%AB%E8%AD%A6"
        )
        assert not resolved.is_filtered

    def test_cap_source(self):
        """Test the item type comes first in the filter URL."""
        source = FeedSource(tag="地震", filter_url="https://alerts.example/rss", data_type="cap")

        assert source.resolve(BASE).url == BASE + "filter?type=cap&url=https%3A%2F%2Falerts.example%2Frss"


class TestCategory:
    """Tests for Category."""

    def test_include_precedence(self):
        """Test caller include beats source include beats category include."""
        category = Category(
            name="c",
            include="cat",
            sources=(
                FeedSource(tag="own", filter_url="http://a", include="own"),
                FeedSource(tag="inherit", filter_url="http://b"),
            ),
        )

        default = category.resolve_sources(BASE)
        override = category.resolve_sources(BASE, include="caller")

        assert default[0].url.endswith("include=own")
        assert default[1].url.endswith("include=cat")
        assert all(s.url.endswith("include=caller") for s in override)

    def test_load_packaged(self):
        """Test the packaged categories load."""
        catalog = load_categories()

        assert {"main", "city", "typhoon", "earthquake", "ncdr", "hcfd", "hcfdrss"} <= set(catalog.names())
        assert catalog.get("ncdr").dedup_strategy == "simple"
        assert catalog.get("typhoon").activation == "all"
        assert len(catalog.get("main").sources) > 0

    def test_unknown_category(self):
        """Test an unknown name raises."""
        with pytest.raises(UnknownCategoryError):
            load_categories().get("nope")

    def test_load_invalid(self, tmp_path):
        """Test a source without a target is a configuration error."""
        path = tmp_path / "categories.yaml"
        path.write_text("categories:\n  c:\n    sources:\n      - tag: t\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_categories(path)

    def test_invalid_patterns_rejected(self):
        """Test category and source patterns that do not compile are rejected."""
        with pytest.raises(ValidationError):
            Category(name="c", activation_pattern="竹市(消防")
        with pytest.raises(ValidationError):
            Category(name="c", include="[火警")
        with pytest.raises(ValidationError):
            FeedSource(tag="t", filter_url="http://a", include="(")

    def test_load_invalid_pattern(self, tmp_path):
        """Test a categories file with a broken pattern fails to load."""
        path = tmp_path / "categories.yaml"
        path.write_text(
            'categories:\n  x:\n    activation_pattern: "竹市(消防"\n'
            "    sources:\n      - tag: t\n        url: http://a/rss\n",
            encoding="utf-8",
        )

        with pytest.raises(ConfigurationError):
            load_categories(path)
