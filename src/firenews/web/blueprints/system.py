"""
System API blueprint: category listing and health check.
"""

from flask import Blueprint, jsonify

from firenews.models.category import CategoryCatalog
from firenews.web.serializers import category_to_dict


class SystemBlueprint:
    """Blueprint for service metadata."""

    def __init__(self, catalog: CategoryCatalog, version: str):
        """Initialize the system blueprint.

        Args:
            catalog: Configured categories
            version: Application version
        """
        self.catalog = catalog
        self.version = version
        self.blueprint = Blueprint("system", __name__)
        self._register_routes()

    def _register_routes(self):
        """Register all system routes."""
        self.blueprint.add_url_rule("/api/categories", view_func=self._categories, methods=["GET"])
        self.blueprint.add_url_rule("/healthz", view_func=self._health, methods=["GET"])

    def _categories(self):
        """List configured categories."""
        return jsonify({"categories": [category_to_dict(c) for c in self.catalog]})

    def _health(self):
        return jsonify({"status": "ok", "version": self.version})
