"""Core business logic for firenews.

Components are wired by the factory functions in ``firenews.core.factories``;
the web layer and the CLI only use those and the result types below.
"""

from firenews.core.factories import (
    create_aggregator,
    create_catalog,
    create_feed_filter,
    create_fetcher,
    create_registry,
    create_shortener,
    create_social_client,
)

# Result types (allowed for type hints and return values)
from firenews.core.fetcher import FetchResult, FetchStats
from firenews.core.links import ShortenResult
from firenews.core.pipeline import AggregationResult

__all__ = [
    # Factory functions
    "create_aggregator",
    "create_catalog",
    "create_feed_filter",
    "create_fetcher",
    "create_registry",
    "create_shortener",
    "create_social_client",
    # Result types
    "AggregationResult",
    "FetchResult",
    "FetchStats",
    "ShortenResult",
]
