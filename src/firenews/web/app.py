"""
Flask application for the firenews JSON API.
"""

from typing import Optional

from flask import Flask
from werkzeug.exceptions import HTTPException

from firenews.config import Config, get_config
from firenews.core.factories import (
    create_aggregator,
    create_feed_filter,
    create_registry,
    create_social_client,
)
from firenews.core.feed_filter import FeedFilter
from firenews.core.pipeline import NewsAggregator
from firenews.core.social import SocialFeedClient
from firenews.exceptions import FireNewsError
from firenews.logger import get_logger
from firenews.web.serializers import error_response

logger = get_logger(__name__)


def create_app(
    config: Optional[Config] = None,
    aggregator: Optional[NewsAggregator] = None,
    feed_filter: Optional[FeedFilter] = None,
    social_client: Optional[SocialFeedClient] = None,
) -> Flask:
    """Create and configure Flask application.

    Collaborators not passed in are built from the configuration; the
    registry and categories files are loaded here, so a broken data file
    fails at startup.

    Args:
        config: Application configuration
        aggregator: Aggregation pipeline
        feed_filter: Feed filter for the filter endpoint
        social_client: Social feed client

    Returns:
        Configured Flask application

    Raises:
        ConfigurationError: If the registry or categories file is invalid
    """
    config = config or get_config()

    app = Flask(__name__)
    app.config["DEBUG"] = config.web.debug
    app.json.ensure_ascii = False
    app.json.sort_keys = False

    registry = aggregator.registry if aggregator is not None else create_registry(config)
    aggregator = aggregator or create_aggregator(config, registry=registry)
    feed_filter = feed_filter or create_feed_filter(config, registry)
    social_client = social_client or create_social_client(config, registry)

    # ========================================================================
    # Register API Blueprints
    # ========================================================================

    from firenews.web.blueprints import (
        BloggerBlueprint,
        NewsBlueprint,
        SocialBlueprint,
        SystemBlueprint,
        UtilBlueprint,
    )

    expose = config.web.expose_source_key
    app.register_blueprint(NewsBlueprint(aggregator, expose).blueprint)
    app.register_blueprint(BloggerBlueprint(aggregator, expose).blueprint)
    app.register_blueprint(UtilBlueprint(feed_filter).blueprint)
    app.register_blueprint(SocialBlueprint(social_client).blueprint)
    app.register_blueprint(SystemBlueprint(aggregator.catalog, config.version).blueprint)

    @app.after_request
    def add_cors_headers(response):
        if config.web.cors_origin:
            response.headers["Access-Control-Allow-Origin"] = config.web.cors_origin
            response.headers["Access-Control-Allow-Methods"] = "GET"
        return response

    # ========================================================================
    # Error Handlers
    # ========================================================================

    @app.errorhandler(FireNewsError)
    def firenews_error(e: FireNewsError):
        """Map firenews errors to the JSON error envelope."""
        if e.status_code >= 500:
            logger.error(f"{type(e).__name__}: {e}")
        else:
            logger.info(f"{type(e).__name__}: {e}")
        return error_response(str(e), e.status_code)

    @app.errorhandler(HTTPException)
    def http_error(e: HTTPException):
        """Handle 404, 405 and other HTTP errors."""
        return error_response(e.description or e.name, e.code or 500)

    @app.errorhandler(500)
    def server_error(e):
        """Handle 500 errors."""
        logger.error(f"Server error: {e}")
        return error_response("Internal server error", 500)

    logger.info(
        f"Web app created with {len(aggregator.catalog)} categories "
        f"(filter endpoint: {config.web.filter_base_url})"
    )

    return app
