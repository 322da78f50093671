"""
Keyword classification of news items.

Exclusion runs first and is unconditional: items from blocked publishers
and items whose title matches the noise pattern are dropped. Activation then
flags the remaining items that are directly relevant (status 1).
"""

import re
from typing import Iterable, Mapping, Optional, Sequence

from firenews.logger import get_logger
from firenews.models.item import NewsItem
from firenews.models.registry import SourceRegistry

logger = get_logger(__name__)


def cjk_normalize(text: str, replacements: Optional[Mapping[str, str]] = None) -> str:
    """Replace look-alike CJK characters with their canonical form.

    Some publishers type the radical-form 巿 (U+5DFF) where 市 is meant, which
    would make city-name keywords miss.
    """
    if not text:
        return ""
    for variant, canonical in (replacements if replacements is not None else {"巿": "市"}).items():
        text = text.replace(variant, canonical)
    return text


def all_keywords_pattern(keywords: Sequence[str]) -> str:
    """Build a pattern matching titles that contain every keyword, in any order.

    Args:
        keywords: Literal keywords

    Returns:
        Regular expression using one lookahead per keyword
    """
    return "".join(f"(?=.*{re.escape(word)})" for word in keywords)


def co_occurrence_pattern(first: Sequence[str], second: Sequence[str]) -> str:
    """Build a pattern matching a term of ``first`` and a term of ``second`` in either order.

    ``co_occurrence_pattern(["竹市"], ["消防", "義消"])`` gives
    ``竹市.*消防|消防.*竹市|竹市.*義消|義消.*竹市``.
    """
    alternatives = []
    for a in first:
        for b in second:
            a_, b_ = re.escape(a), re.escape(b)
            alternatives.append(f"{a_}.*{b_}|{b_}.*{a_}")
    return "|".join(alternatives)


def compile_pattern(pattern: Optional[str]) -> Optional[re.Pattern]:
    """Compile a pattern; an empty or missing pattern compiles to None."""
    if not pattern:
        return None
    return re.compile(pattern)


class Classifier:
    """Drops blocked and off-topic items and flags relevant ones."""

    def __init__(
        self,
        registry: SourceRegistry,
        activation_pattern: Optional[str] = None,
        activate_all: bool = False,
    ):
        """Initialize classifier.

        Args:
            registry: Source registry (block set, active set, noise pattern)
            activation_pattern: Relevance pattern; the registry's when omitted
            activate_all: Flag every surviving item active
        """
        self.registry = registry
        self.blocked = registry.blocked
        self.active = registry.active
        self.activate_all = activate_all

        # Compiled once per configuration
        self._noise = compile_pattern(registry.noise_pattern)
        self._relevance = compile_pattern(
            activation_pattern if activation_pattern is not None else registry.relevance_pattern
        )

    def normalize(self, text: str) -> str:
        return cjk_normalize(text, self.registry.cjk_replacements)

    def is_excluded(self, item: NewsItem) -> bool:
        """Whether an item must be dropped."""
        if item.source_key in self.blocked:
            return True
        if self._noise is not None and self._noise.search(self.normalize(item.title)):
            return True
        return False

    def is_relevant(self, item: NewsItem) -> bool:
        """Whether an item is directly relevant."""
        if self.activate_all:
            return True
        if item.source_key in self.active:
            return True
        if self._relevance is not None and self._relevance.search(self.normalize(item.title)):
            return True
        return False

    def exclude(self, items: Iterable[NewsItem]) -> list[NewsItem]:
        """Drop blocked and noise items, keeping order."""
        batch = list(items)
        kept = [item for item in batch if not self.is_excluded(item)]
        if len(kept) != len(batch):
            logger.debug(f"Excluded {len(batch) - len(kept)} of {len(batch)} items")
        return kept

    def activate(self, items: list[NewsItem]) -> list[NewsItem]:
        """Flag relevant items with status 1, in place."""
        for item in items:
            if self.is_relevant(item):
                item.status = 1
        return items

    def classify(self, items: Iterable[NewsItem]) -> list[NewsItem]:
        """Exclude, then activate.

        Args:
            items: Deduplicated items

        Returns:
            Surviving items with status set
        """
        return self.activate(self.exclude(items))
