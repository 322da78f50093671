"""
Publisher resolution from article links.
"""

from dataclasses import dataclass

from firenews.models.item import UNKNOWN_SOURCE
from firenews.models.registry import SourceRegistry


@dataclass(frozen=True)
class ResolvedSource:
    """Publisher attributed to a link."""

    name: str
    key: str

    @property
    def resolved(self) -> bool:
        return bool(self.key)


class SourceResolver:
    """Maps links to publishers by domain substring.

    A link may contain more than one registered key, e.g. a feed proxy path
    that embeds the origin's name. The longest matching key wins; keys of
    equal length resolve by registration order.
    """

    def __init__(self, registry: SourceRegistry):
        self.registry = registry
        # Stable sort keeps registration order among keys of equal length
        self._keys = sorted(registry.publishers, key=len, reverse=True)

    def resolve(self, link: str) -> ResolvedSource:
        """Resolve the publisher of a link.

        Args:
            link: Article link

        Returns:
            ResolvedSource; UNKNOWN_SOURCE with an empty key when nothing matches
        """
        if link:
            for key in self._keys:
                if key in link:
                    return ResolvedSource(name=self.registry.publishers[key], key=key)
        return ResolvedSource(name=UNKNOWN_SOURCE, key="")
