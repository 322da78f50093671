"""
Social feed API blueprint.
"""

from flask import Blueprint, jsonify, request

from firenews.core.feed_filter import compile_include
from firenews.core.social import SocialFeedClient
from firenews.web.serializers import social_post_to_dict


class SocialBlueprint:
    """Blueprint for page and group feeds."""

    def __init__(self, client: SocialFeedClient):
        """Initialize the social blueprint.

        Args:
            client: Social feed client
        """
        self.client = client
        self.blueprint = Blueprint("facebook", __name__, url_prefix="/api/facebook/v1")
        self._register_routes()

    def _register_routes(self):
        """Register all social routes."""
        self.blueprint.add_url_rule("/feed/<page_id>", view_func=self._feed, methods=["GET"])

    def _feed(self, page_id: str):
        """List posts of a page or group matching ``?include=``.

        Query params:
            include: Regular expression matched against the post message
            type: ``pg`` for a page, anything else for a group

        Returns:
            ``{"fb": [...]}``
        """
        include = request.args.get("include", "")
        compile_include(include)

        posts = self.client.list_posts(page_id, request.args.get("type"))
        posts = self.client.filter_posts(posts, include)
        return jsonify({"fb": [social_post_to_dict(post) for post in posts]})
