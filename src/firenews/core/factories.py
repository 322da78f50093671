"""
Factory functions for creating core components with proper dependency injection.

All components are built from the config system here, so the web layer and
the CLI share one wiring and tests can swap single collaborators.

Usage:
    from firenews.core.factories import create_aggregator, create_feed_filter

    aggregator = create_aggregator()
    result = aggregator.aggregate("main")
"""

from typing import Optional

import httpx

from firenews.config import Config, get_config
from firenews.core.feed_filter import FeedFilter
from firenews.core.fetcher import FeedFetcher
from firenews.core.links import LinkShortener
from firenews.core.pipeline import NewsAggregator
from firenews.core.social import SocialFeedClient
from firenews.core.timestamps import TimestampNormalizer
from firenews.models.category import CategoryCatalog, load_categories
from firenews.models.registry import SourceRegistry, load_registry


def create_registry(config: Optional[Config] = None) -> SourceRegistry:
    """Load the source registry named by the pipeline config.

    Raises:
        ConfigurationError: If the registry file is missing or invalid
    """
    config = config or get_config()
    return load_registry(config.pipeline.registry_path)


def create_catalog(config: Optional[Config] = None) -> CategoryCatalog:
    """Load the category catalog named by the pipeline config.

    Raises:
        ConfigurationError: If the categories file is missing or invalid
    """
    config = config or get_config()
    return load_categories(config.pipeline.categories_path)


def create_shortener(config: Optional[Config] = None) -> LinkShortener:
    """Create a configured LinkShortener instance."""
    config = config or get_config()
    return LinkShortener(config.shortener)


def create_fetcher(
    registry: SourceRegistry,
    config: Optional[Config] = None,
    client: Optional[httpx.Client] = None,
) -> FeedFetcher:
    """Create a configured FeedFetcher instance.

    Args:
        registry: Source registry
        config: Application configuration
        client: Optional shared HTTP client

    Returns:
        Configured FeedFetcher instance
    """
    config = config or get_config()
    return FeedFetcher(
        registry,
        config=config.fetcher,
        shortener=create_shortener(config),
        timestamps=TimestampNormalizer(config.pipeline.timezone, registry.time_corrections),
        client=client,
    )


def create_aggregator(
    config: Optional[Config] = None,
    registry: Optional[SourceRegistry] = None,
    catalog: Optional[CategoryCatalog] = None,
) -> NewsAggregator:
    """Create a configured NewsAggregator instance.

    Args:
        config: Application configuration
        registry: Source registry; loaded from config if omitted
        catalog: Category catalog; loaded from config if omitted

    Returns:
        Configured NewsAggregator instance
    """
    config = config or get_config()
    registry = registry or create_registry(config)
    catalog = catalog or create_catalog(config)
    return NewsAggregator(registry, catalog, config=config, fetcher=create_fetcher(registry, config))


def create_feed_filter(
    config: Optional[Config] = None,
    registry: Optional[SourceRegistry] = None,
) -> FeedFilter:
    """Create a configured FeedFilter instance."""
    config = config or get_config()
    replacements = registry.cjk_replacements if registry is not None else None
    return FeedFilter(config.fetcher, replacements=replacements)


def create_social_client(
    config: Optional[Config] = None,
    registry: Optional[SourceRegistry] = None,
) -> SocialFeedClient:
    """Create a configured SocialFeedClient instance."""
    config = config or get_config()
    replacements = registry.cjk_replacements if registry is not None else None
    return SocialFeedClient(config.social, timezone=config.pipeline.timezone, replacements=replacements)
