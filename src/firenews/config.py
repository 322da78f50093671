"""
Configuration management for FireNews.

Uses Pydantic for validation and pydantic-settings for environment variable support.
"""

from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FetcherConfig(BaseSettings):
    """RSS/Atom fetcher configuration."""

    model_config = SettingsConfigDict(env_prefix="FETCHER_")

    # HTTP settings
    timeout_seconds: float = Field(default=10.0, gt=0, le=300, description="Request timeout")
    user_agent: str = Field(
        default="FireNews/0.4.0 (+https://github.com/firenews)",
        description="User-Agent header"
    )

    # Follow redirects
    follow_redirects: bool = Field(default=True)
    max_redirects: int = Field(default=5, ge=0, le=20)

    # Fan-out
    max_workers: int = Field(
        default=16, ge=1, le=64,
        description="Maximum feeds fetched in parallel for one request"
    )


class ShortenerConfig(BaseSettings):
    """Link shortener configuration.

    The shortener speaks the Google URL shortener wire shape:
    ``POST {endpoint}?key={api_key}`` with ``{"longUrl": ...}`` and an ``id``
    field in the response. When disabled, items keep their long link.
    """

    model_config = SettingsConfigDict(env_prefix="SHORTENER_")

    enabled: bool = Field(default=False, description="Enable link shortening")
    endpoint: str = Field(
        default="https://www.googleapis.com/urlshortener/v1/url",
        description="Shortener API endpoint"
    )
    api_key: Optional[str] = Field(default=None, description="Shortener API key")
    timeout_seconds: float = Field(default=5.0, gt=0, le=60, description="Request timeout")


class SocialConfig(BaseSettings):
    """Social feed (Graph API) configuration."""

    model_config = SettingsConfigDict(env_prefix="SOCIAL_")

    graph_url: str = Field(default="https://graph.facebook.com", description="Graph API base URL")
    app_id: Optional[str] = Field(default=None, description="Application ID")
    app_secret: Optional[str] = Field(default=None, description="Application secret")
    timeout_seconds: float = Field(default=10.0, gt=0, le=60, description="Request timeout")

    @property
    def access_token(self) -> Optional[str]:
        """App access token in ``id|secret`` form."""
        if not self.app_id or not self.app_secret:
            return None
        return f"{self.app_id}|{self.app_secret}"


class PipelineConfig(BaseSettings):
    """Aggregation pipeline configuration."""

    model_config = SettingsConfigDict(env_prefix="PIPELINE_")

    timezone: str = Field(default="Asia/Taipei", description="Reference timezone for item times")
    registry_path: Optional[str] = Field(
        default=None,
        description="Source registry YAML (defaults to the packaged registry)"
    )
    categories_path: Optional[str] = Field(
        default=None,
        description="Categories YAML (defaults to the packaged categories)"
    )

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate timezone name."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v!r}") from e
        return v


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        description="Log format"
    )

    # File logging
    file_enabled: bool = Field(default=False, description="Enable file logging")
    file_path: str = Field(default="logs/firenews.log", description="Log file path")
    rotation: str = Field(default="100 MB", description="Log rotation size")
    retention: str = Field(default="30 days", description="Log retention period")

    # Console logging
    console_enabled: bool = Field(default=True, description="Enable console logging")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v


class WebConfig(BaseSettings):
    """Web API configuration."""

    model_config = SettingsConfigDict(env_prefix="WEB_")

    host: str = Field(default="0.0.0.0", description="Web server host")
    port: int = Field(default=1234, ge=1, le=65535, description="Web server port")
    debug: bool = Field(default=False, description="Debug mode")
    release: bool = Field(default=False, description="Release deployment (behind the reverse proxy)")

    # Base URLs of this service's own filter endpoint, used by filtered sources
    filter_base_url_release: str = Field(default="http://localhost/firenews/api/util/v1/")
    filter_base_url_debug: Optional[str] = Field(
        default=None,
        description="Debug filter endpoint; this server on localhost at WEB_PORT when unset",
    )

    expose_source_key: bool = Field(default=False, description="Include sourceKey in responses")
    cors_origin: str = Field(default="*", description="Access-Control-Allow-Origin for API responses; empty disables")

    @property
    def filter_base_url(self) -> str:
        """Filter endpoint base URL for the current deployment mode."""
        if self.release:
            return self.filter_base_url_release
        return self.filter_base_url_debug or f"http://localhost:{self.port}/api/util/v1/"


class Config(BaseSettings):
    """Main application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FIRENEWS_",
        case_sensitive=False,
    )

    # Application
    version: str = Field(default="0.4.0", description="Application version")
    app_name: str = Field(default="FireNews", description="Application name")

    # Sub-configurations
    fetcher: FetcherConfig = Field(default_factory=FetcherConfig)
    shortener: ShortenerConfig = Field(default_factory=ShortenerConfig)
    social: SocialConfig = Field(default_factory=SocialConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    web: WebConfig = Field(default_factory=WebConfig)


_SECTIONS = {
    "fetcher": FetcherConfig,
    "shortener": ShortenerConfig,
    "social": SocialConfig,
    "pipeline": PipelineConfig,
    "logging": LoggingConfig,
    "web": WebConfig,
}

# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def load_config_from_yaml(yaml_path: str) -> Config:
    """Load configuration from a YAML file.

    Note: Values loaded from YAML take precedence over environment variables.

    Args:
        yaml_path: Path to the YAML configuration file.

    Returns:
        Config instance loaded from the file.
    """
    import yaml

    yaml_file = Path(yaml_path)
    if not yaml_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

    with yaml_file.open("r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    main_config = {}
    for key, value in config_dict.items():
        if key not in _SECTIONS:
            main_config[key] = value

    # Nested sections are rebuilt so env vars can still fill unset fields
    for key, config_class in _SECTIONS.items():
        main_config[key] = config_class(**(config_dict.get(key) or {}))

    return Config(**main_config)


def reload_config() -> Config:
    """Reload configuration from environment and YAML files."""
    global _config
    _config = None

    config_yaml = Path("config/config.yaml")
    if config_yaml.exists():
        _config = load_config_from_yaml(str(config_yaml))
    else:
        _config = Config()

    return _config
