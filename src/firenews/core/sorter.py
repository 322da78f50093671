"""
Recency ordering of news items.
"""

from typing import Iterable

from firenews.models.item import NewsItem


def sort_by_time(items: Iterable[NewsItem]) -> list[NewsItem]:
    """Most recent first.

    The sort is stable, so items with the same instant keep their relative
    order, and items without a parsed time (ZERO_TIME) end up last.
    """
    return sorted(items, key=lambda item: item.time, reverse=True)
