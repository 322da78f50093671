"""
News API blueprints.

``/api/news/v1/<category>`` aggregates a configured category.
``/api/blogger/v1/feed/<category>`` does the same with the include pattern
of the filtered sources taken from the query string.
"""

from flask import Blueprint, jsonify, request

from firenews.core.feed_filter import compile_include
from firenews.core.pipeline import NewsAggregator
from firenews.web.serializers import news_item_to_dict


class NewsBlueprint:
    """Blueprint for category aggregation."""

    def __init__(self, aggregator: NewsAggregator, expose_source_key: bool = False):
        """Initialize the news blueprint.

        Args:
            aggregator: Aggregation pipeline
            expose_source_key: Include ``sourceKey`` in serialized items
        """
        self.aggregator = aggregator
        self.expose_source_key = expose_source_key
        self.blueprint = Blueprint("news", __name__, url_prefix="/api/news/v1")
        self._register_routes()

    def _register_routes(self):
        """Register all news routes."""
        self.blueprint.add_url_rule("/<category>", view_func=self._category, methods=["GET"])

    def _respond(self, category: str, include=None):
        result = self.aggregator.aggregate(category, include=include)
        return jsonify({
            "news": [news_item_to_dict(item, self.expose_source_key) for item in result.items],
        })

    def _category(self, category: str):
        """Aggregate one category.

        Returns:
            ``{"news": [...]}``
        """
        return self._respond(category)


class BloggerBlueprint(NewsBlueprint):
    """Blueprint for aggregation with a caller-supplied include pattern."""

    def __init__(self, aggregator: NewsAggregator, expose_source_key: bool = False):
        self.aggregator = aggregator
        self.expose_source_key = expose_source_key
        self.blueprint = Blueprint("blogger", __name__, url_prefix="/api/blogger/v1")
        self._register_routes()

    def _register_routes(self):
        self.blueprint.add_url_rule("/feed/<category>", view_func=self._feed, methods=["GET"])

    def _feed(self, category: str):
        """Aggregate one category filtered by ``?include=``.

        Query params:
            include: Regular expression for the filtered sources

        Raises:
            InvalidPatternError: If ``include`` does not compile
        """
        include = request.args.get("include", "")
        compile_include(include)
        return self._respond(category, include=include)
