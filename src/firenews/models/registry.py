"""
Source registry data model.

The registry is static data: which domain substrings name which publisher,
which publishers are always blocked or always relevant, per-tag time
corrections, the noise and relevance keyword patterns and the authority
publishers used for duplicate reconciliation.
"""

import re
from pathlib import Path
from typing import Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from firenews.exceptions import ConfigurationError

DEFAULT_REGISTRY_FILE = Path(__file__).resolve().parent.parent / "data" / "registry.yaml"


class AuthorityPolicy(BaseModel):
    """How duplicate coverage of an authority publisher's titles is reconciled."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Publisher display name")
    action: Literal["drop", "reattribute"] = Field(
        default="drop",
        description="drop: mark the authority copy active; reattribute: credit the surviving copy",
    )
    credit_to: Optional[str] = Field(
        default=None,
        description="Publisher credited for re-attributed stories (defaults to the authority)",
    )

    @property
    def credited_name(self) -> str:
        """Publisher name written onto re-attributed items."""
        return self.credit_to or self.name


class SourceRegistry(BaseModel):
    """Immutable registry of publishers and classification data."""

    model_config = ConfigDict(frozen=True)

    publishers: dict[str, str] = Field(
        default_factory=dict,
        description="Domain substring -> publisher display name, in registration order",
    )
    blocked: frozenset[str] = Field(default_factory=frozenset)
    active: frozenset[str] = Field(default_factory=frozenset)
    time_corrections: dict[str, float] = Field(
        default_factory=dict,
        description="Feed tag -> fixed hour offset applied after timezone conversion",
    )
    link_prefixes: dict[str, str] = Field(
        default_factory=dict,
        description="Feed tag -> base URL for relative article links",
    )
    cjk_replacements: dict[str, str] = Field(
        default_factory=lambda: {"巿": "市"},
        description="Look-alike CJK characters and their canonical form",
    )
    noise_pattern: str = Field(default="", description="Titles matching this are excluded")
    relevance_pattern: str = Field(default="", description="Titles matching this are activated")
    authorities: tuple[AuthorityPolicy, ...] = Field(default_factory=tuple)

    @field_validator("noise_pattern", "relevance_pattern")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        """Reject patterns that do not compile."""
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid pattern {v!r}: {e}") from e
        return v

    @field_validator("blocked", "active")
    @classmethod
    def validate_known_keys(cls, v: frozenset[str], info) -> frozenset[str]:
        """Blocked and active keys must be registered publishers."""
        publishers = info.data.get("publishers") or {}
        unknown = sorted(k for k in v if k not in publishers)
        if unknown:
            raise ValueError(f"Keys not in publishers: {unknown}")
        return v


def load_registry(path: Optional[Union[str, Path]] = None) -> SourceRegistry:
    """Load a SourceRegistry from YAML.

    Args:
        path: Registry file; the packaged registry when omitted

    Returns:
        Validated SourceRegistry

    Raises:
        ConfigurationError: If the file is missing or invalid
    """
    registry_file = Path(path) if path else DEFAULT_REGISTRY_FILE
    if not registry_file.exists():
        raise ConfigurationError(f"Source registry not found: {registry_file}")

    try:
        with registry_file.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return SourceRegistry(**data)
    except (yaml.YAMLError, ValidationError, TypeError) as e:
        raise ConfigurationError(f"Invalid source registry {registry_file}: {e}") from e
