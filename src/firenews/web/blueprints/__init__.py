"""
API blueprints for the firenews web application.
"""

from firenews.web.blueprints.news import BloggerBlueprint, NewsBlueprint
from firenews.web.blueprints.social import SocialBlueprint
from firenews.web.blueprints.system import SystemBlueprint
from firenews.web.blueprints.util import UtilBlueprint

__all__ = [
    "BloggerBlueprint",
    "NewsBlueprint",
    "SocialBlueprint",
    "SystemBlueprint",
    "UtilBlueprint",
]
