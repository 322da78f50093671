"""
Per-request aggregation pipeline.

One request for a category fetches all of its sources in parallel, merges
what came back, then deduplicates, classifies and sorts the merged batch:

    fetch (fan-out) -> merge -> deduplicate -> classify -> sort

Failed sources only drop their own items; the request itself never fails
because of a collaborator.
"""

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Optional

from firenews.config import Config, get_config
from firenews.core.classifier import Classifier
from firenews.core.deduplicator import Deduplicator, DedupStrategy
from firenews.core.fetcher import FeedFetcher, FetchResult, FetchStats
from firenews.core.sorter import sort_by_time
from firenews.logger import get_logger
from firenews.models.category import Category, CategoryCatalog, FeedSource
from firenews.models.item import NewsItem
from firenews.models.registry import SourceRegistry

logger = get_logger(__name__)


@dataclass
class AggregationResult:
    """Outcome of one aggregation request."""

    category: str
    items: list[NewsItem] = field(default_factory=list)
    stats: FetchStats = field(default_factory=FetchStats)
    elapsed_seconds: float = 0.0

    @property
    def failed_sources(self) -> int:
        return self.stats.failed_fetches


class NewsAggregator:
    """Answers category requests with a merged, cleaned, ordered item list."""

    def __init__(
        self,
        registry: SourceRegistry,
        catalog: CategoryCatalog,
        config: Optional[Config] = None,
        fetcher: Optional[FeedFetcher] = None,
    ):
        """Initialize aggregator.

        Args:
            registry: Source registry
            catalog: Configured categories
            config: Application configuration
            fetcher: Feed fetcher; built from the registry and config if omitted
        """
        self.registry = registry
        self.catalog = catalog
        self.config = config or get_config()
        self.fetcher = fetcher or FeedFetcher(registry, self.config.fetcher)
        self.classifiers = {category.name: self._build_classifier(category) for category in catalog}

    def _build_classifier(self, category: Category) -> Classifier:
        return Classifier(
            self.registry,
            activation_pattern=category.activation_pattern,
            activate_all=category.activation == "all",
        )

    def aggregate(self, name: str, include: Optional[str] = None) -> AggregationResult:
        """Aggregate one category.

        Args:
            name: Category name
            include: Include pattern replacing the configured ones of filtered sources

        Returns:
            AggregationResult

        Raises:
            UnknownCategoryError: If the category is not configured
        """
        category = self.catalog.get(name)
        start_time = time.time()

        sources = category.resolve_sources(self.config.web.filter_base_url, include)
        results = self.fetch_all(sources)

        stats = FetchStats()
        merged: list[NewsItem] = []
        for result in results:
            stats.add_result(result)
            merged.extend(result.items)

        items = self.process(category, merged)

        elapsed = time.time() - start_time
        logger.info(
            f"Aggregated {name}: {stats.successful_fetches}/{stats.total_feeds} feeds, "
            f"{len(merged)} items -> {len(items)} in {elapsed:.2f}s"
        )
        if stats.failed_fetches:
            logger.warning(f"{stats.failed_fetches} feed(s) failed for {name}: {stats.errors_by_type}")

        return AggregationResult(category=name, items=items, stats=stats, elapsed_seconds=elapsed)

    def fetch_all(self, sources: list[FeedSource]) -> list[FetchResult]:
        """Fetch sources in parallel.

        Results are collected in the calling thread as they complete and
        returned in source order, so merging is deterministic.

        Args:
            sources: Resolved feed sources

        Returns:
            One FetchResult per source
        """
        if not sources:
            return []

        workers = min(self.config.fetcher.max_workers, len(sources))
        results: list[Optional[FetchResult]] = [None] * len(sources)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(self.fetcher.fetch, source): index
                for index, source in enumerate(sources)
            }
            for future in as_completed(futures):
                index = futures[future]
                source = sources[index]
                try:
                    results[index] = future.result()
                except Exception as e:
                    # fetch() reports its own failures, so this is unexpected
                    logger.exception(f"Fetch worker for {source.tag} crashed")
                    results[index] = FetchResult(
                        success=False,
                        tag=source.tag,
                        feed_url=source.url or "",
                        error=f"Worker error: {type(e).__name__}: {e}",
                    )
        return [result for result in results if result is not None]

    def process(self, category: Category, items: list[NewsItem]) -> list[NewsItem]:
        """Deduplicate, classify and sort a merged batch.

        Args:
            category: Category the batch belongs to
            items: Merged items of all sources

        Returns:
            Final item list, most recent first
        """
        deduplicator = Deduplicator(DedupStrategy(category.dedup_strategy), self.registry.authorities)
        classifier = self.classifiers.get(category.name) or self._build_classifier(category)

        items = deduplicator.deduplicate(items)
        items = classifier.classify(items)
        return sort_by_time(items)
