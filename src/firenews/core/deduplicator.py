"""
Cross-source duplicate removal.

Two strategies:

- SIMPLE keeps one item per (title, source) pair.
- AUTHORITY additionally lets authority publishers (a wire service, a
  flagship paper) win over duplicate coverage of the same title from other
  publishers, then collapses what is left by (title, source) and by link.

Titles are compared in canonical form (no whitespace, no trailing
ellipsis). Both strategies are idempotent.
"""

from enum import Enum
from typing import Callable, Hashable, Iterable, Optional, Sequence

from firenews.core.titles import canonical_title
from firenews.logger import get_logger
from firenews.models.item import NewsItem
from firenews.models.registry import AuthorityPolicy

logger = get_logger(__name__)


class DedupStrategy(str, Enum):
    """Deduplication strategy."""

    SIMPLE = "simple"
    AUTHORITY = "authority"


def collapse(items: Iterable[NewsItem], key: Callable[[NewsItem], Hashable]) -> list[NewsItem]:
    """Keep one item per key.

    The last item seen for a key wins; it takes the position of the first.
    """
    kept: dict = {}
    for item in items:
        kept[key(item)] = item
    return list(kept.values())


def _title_and_source(item: NewsItem) -> tuple[str, str]:
    return item.title, item.source


def _link(item: NewsItem) -> str:
    return item.link


class Deduplicator:
    """Removes duplicate items from one category's batch."""

    def __init__(
        self,
        strategy: DedupStrategy = DedupStrategy.AUTHORITY,
        authorities: Optional[Sequence[AuthorityPolicy]] = None,
    ):
        """Initialize deduplicator.

        Args:
            strategy: Deduplication strategy
            authorities: Authority publishers in precedence order (AUTHORITY only)
        """
        self.strategy = DedupStrategy(strategy)
        self.authorities = tuple(authorities or ())
        self.stats = {"runs": 0, "input": 0, "removed": 0, "reattributed": 0}

    def deduplicate(self, items: Iterable[NewsItem]) -> list[NewsItem]:
        """Deduplicate a batch of items.

        Items are modified in place (canonical title, and for AUTHORITY the
        status or source of authority items that had duplicates).

        Args:
            items: Items from all sources of one category

        Returns:
            Items with duplicates removed, in first-seen order
        """
        batch = list(items)
        total = len(batch)
        for item in batch:
            item.title = canonical_title(item.title)

        if self.strategy is DedupStrategy.AUTHORITY:
            for policy in self.authorities:
                batch = self._apply_authority(batch, policy)
            batch = collapse(batch, _title_and_source)
            batch = collapse(batch, _link)
        else:
            batch = collapse(batch, _title_and_source)

        self.stats["runs"] += 1
        self.stats["input"] += total
        self.stats["removed"] += total - len(batch)
        logger.debug(f"Deduplicated {total} items to {len(batch)} ({self.strategy.value})")
        return batch

    def _apply_authority(self, items: list[NewsItem], policy: AuthorityPolicy) -> list[NewsItem]:
        """Drop other publishers' copies of an authority's titles.

        Args:
            items: Current batch
            policy: Authority publisher and what happens to its matched items

        Returns:
            Batch without the other publishers' copies
        """
        authority_titles = {item.title for item in items if item.source == policy.name}
        if not authority_titles:
            return items

        kept = []
        duplicated = set()
        for item in items:
            if item.title in authority_titles and item.source != policy.name:
                duplicated.add(item.title)
                continue
            kept.append(item)

        for item in kept:
            if item.source != policy.name or item.title not in duplicated:
                continue
            if policy.action == "drop":
                item.status = 1
            elif item.source != policy.credited_name:
                item.source = policy.credited_name
                self.stats["reattributed"] += 1

        removed = len(items) - len(kept)
        if removed:
            logger.debug(f"Dropped {removed} copies of {policy.name} stories")
        return kept
