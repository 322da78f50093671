"""Data models for firenews."""

from firenews.models.category import (
    Category,
    CategoryCatalog,
    FeedSource,
    load_categories,
)
from firenews.models.item import (
    UNKNOWN_SOURCE,
    ZERO_TIME,
    NewsItem,
    RawItem,
    SocialPost,
)
from firenews.models.registry import (
    AuthorityPolicy,
    SourceRegistry,
    load_registry,
)

__all__ = [
    "Category",
    "CategoryCatalog",
    "FeedSource",
    "load_categories",
    "UNKNOWN_SOURCE",
    "ZERO_TIME",
    "NewsItem",
    "RawItem",
    "SocialPost",
    "AuthorityPolicy",
    "SourceRegistry",
    "load_registry",
]
