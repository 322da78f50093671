"""
Utility API blueprint: the feed filter endpoint.
"""

from flask import Blueprint, Response, request

from firenews.core.feed_filter import FeedFilter
from firenews.web.serializers import error_response


class UtilBlueprint:
    """Blueprint for the regex feed filter."""

    def __init__(self, feed_filter: FeedFilter):
        """Initialize the util blueprint.

        Args:
            feed_filter: Feed filter used to answer requests
        """
        self.feed_filter = feed_filter
        self.blueprint = Blueprint("util", __name__, url_prefix="/api/util/v1")
        self._register_routes()

    def _register_routes(self):
        """Register all util routes."""
        self.blueprint.add_url_rule("/filter", view_func=self._filter, methods=["GET"])

    def _filter(self):
        """Filter an upstream feed.

        Query params:
            url: Upstream RSS/Atom feed
            include: Regular expression matched against title, description, content
            type: ``cap`` for CAP alert feeds

        Returns:
            RSS 2.0 document
        """
        url = request.args.get("url", "")
        if not url:
            return error_response("Missing 'url' parameter", 400)

        rss = self.feed_filter.filter_feed(
            url,
            include=request.args.get("include", ""),
            data_type=request.args.get("type") or None,
        )
        return Response(rss, mimetype="application/rss+xml")
