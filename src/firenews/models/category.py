"""
Category and feed source configuration models.
"""

import re
from pathlib import Path
from typing import Literal, Optional, Union
from urllib.parse import quote, urlencode

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from firenews.exceptions import ConfigurationError, UnknownCategoryError

DEFAULT_CATEGORIES_FILE = Path(__file__).resolve().parent.parent / "data" / "categories.yaml"


def _check_pattern(pattern: Optional[str]) -> Optional[str]:
    if pattern is None:
        return pattern
    try:
        re.compile(pattern)
    except re.error as e:
        raise ValueError(f"Invalid pattern {pattern!r}: {e}") from e
    return pattern


class FeedSource(BaseModel):
    """One feed contributing to a category.

    A source either names its feed ``url`` directly, or names an upstream
    ``filter_url`` that is routed through the service's own filter endpoint
    with an ``include`` pattern.
    """

    model_config = ConfigDict(frozen=True)

    tag: str = Field(..., min_length=1, description="Display label of the feed")
    url: Optional[str] = Field(default=None, description="Feed URL")
    filter_url: Optional[str] = Field(default=None, description="Upstream feed for the filter endpoint")
    include: Optional[str] = Field(default=None, description="Include pattern for the filter endpoint")
    data_type: Optional[str] = Field(default=None, description="Filter endpoint item type, e.g. 'cap'")

    @field_validator("include")
    @classmethod
    def validate_include(cls, v: Optional[str]) -> Optional[str]:
        """Reject patterns that do not compile."""
        return _check_pattern(v)

    @model_validator(mode="after")
    def check_target(self) -> "FeedSource":
        """Exactly one of url / filter_url must be set."""
        if bool(self.url) == bool(self.filter_url):
            raise ValueError(f"Source {self.tag!r} needs exactly one of 'url' or 'filter_url'")
        return self

    @property
    def is_filtered(self) -> bool:
        """Whether the source goes through the filter endpoint."""
        return self.filter_url is not None

    def resolve(self, filter_base_url: str, include: Optional[str] = None) -> "FeedSource":
        """Return a source pointing at a concrete feed URL.

        Args:
            filter_base_url: Base URL of the filter endpoint (ending in '/')
            include: Include pattern overriding the source's own

        Returns:
            FeedSource with ``url`` set
        """
        if not self.is_filtered:
            return self

        params = {"url": self.filter_url}
        if self.data_type:
            params = {"type": self.data_type, **params}
        pattern = include if include is not None else self.include
        if pattern is not None:
            params["include"] = pattern

        url = f"{filter_base_url}filter?{urlencode(params, quote_via=quote, safe='')}"
        return FeedSource(tag=self.tag, url=url)


class Category(BaseModel):
    """A named group of feed sources answering one topical request."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    description: str = Field(default="")
    dedup_strategy: Literal["simple", "authority"] = Field(default="authority")
    activation: Literal["pattern", "all"] = Field(default="pattern")
    activation_pattern: Optional[str] = Field(
        default=None,
        description="Relevance pattern; the registry's pattern when omitted",
    )
    include: Optional[str] = Field(
        default=None,
        description="Include pattern for filtered sources that declare none",
    )
    sources: tuple[FeedSource, ...] = Field(default_factory=tuple)

    @field_validator("activation_pattern", "include")
    @classmethod
    def validate_pattern(cls, v: Optional[str]) -> Optional[str]:
        """Reject patterns that do not compile."""
        return _check_pattern(v)

    def resolve_sources(self, filter_base_url: str, include: Optional[str] = None) -> list[FeedSource]:
        """Resolve every source to a concrete feed URL.

        Args:
            filter_base_url: Base URL of the filter endpoint
            include: Caller-supplied include pattern replacing the configured ones

        Returns:
            List of FeedSource with ``url`` set
        """
        resolved = []
        for source in self.sources:
            pattern = include
            if pattern is None and source.include is None:
                pattern = self.include
            resolved.append(source.resolve(filter_base_url, pattern))
        return resolved


class CategoryCatalog:
    """All configured categories, by name."""

    def __init__(self, categories: list[Category]):
        self._categories = {c.name: c for c in categories}

    def __contains__(self, name: str) -> bool:
        return name in self._categories

    def __iter__(self):
        return iter(self._categories.values())

    def __len__(self) -> int:
        return len(self._categories)

    def get(self, name: str) -> Category:
        """Get a category by name.

        Raises:
            UnknownCategoryError: If no such category exists
        """
        try:
            return self._categories[name]
        except KeyError:
            raise UnknownCategoryError(f"Unknown category: {name}") from None

    def names(self) -> list[str]:
        return list(self._categories)


def load_categories(path: Optional[Union[str, Path]] = None) -> CategoryCatalog:
    """Load the category catalog from YAML.

    Args:
        path: Categories file; the packaged catalog when omitted

    Returns:
        CategoryCatalog

    Raises:
        ConfigurationError: If the file is missing or invalid
    """
    categories_file = Path(path) if path else DEFAULT_CATEGORIES_FILE
    if not categories_file.exists():
        raise ConfigurationError(f"Categories file not found: {categories_file}")

    try:
        with categories_file.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        categories = [
            Category(name=name, **(body or {}))
            for name, body in (data.get("categories") or {}).items()
        ]
    except (yaml.YAMLError, ValidationError, TypeError, AttributeError) as e:
        raise ConfigurationError(f"Invalid categories file {categories_file}: {e}") from e

    return CategoryCatalog(categories)
