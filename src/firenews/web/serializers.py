"""
Serializer functions for converting items to dictionaries.

Field names follow the public JSON API (camelCase) consumed by the web
front end.
"""

from datetime import datetime
from typing import Optional

from flask import jsonify

from firenews.models.category import Category
from firenews.models.item import NewsItem, SocialPost


def serialize_datetime(dt: Optional[datetime]) -> Optional[str]:
    """Convert datetime to ISO format string.

    Args:
        dt: Datetime object or None

    Returns:
        ISO format string or None
    """
    return dt.isoformat() if dt else None


def news_item_to_dict(item: NewsItem, expose_source_key: bool = False) -> dict:
    """Convert a NewsItem to a dictionary.

    Args:
        item: NewsItem instance
        expose_source_key: Include the matched publisher key

    Returns:
        Dictionary representation
    """
    data = {
        "title": item.title,
        "timeText": item.time_text,
        "time": serialize_datetime(item.time),
        "link": item.link,
        "originLink": item.origin_link,
        "source": item.source,
        "tag": item.tag,
        "status": item.status,
        "hash": item.hash,
        "description": item.description,
    }
    if expose_source_key:
        data["sourceKey"] = item.source_key
    return data


def social_post_to_dict(post: SocialPost) -> dict:
    """Convert a SocialPost to a dictionary."""
    return {
        "gid": post.gid,
        "pid": post.pid,
        "message": post.message,
        "story": post.story,
        "time": serialize_datetime(post.time),
        "timeText": post.time_text,
        "link": post.link,
        "originLink": post.origin_link,
        "source": post.source,
    }


def category_to_dict(category: Category) -> dict:
    """Convert a Category to a dictionary."""
    return {
        "name": category.name,
        "description": category.description,
        "sources": len(category.sources),
    }


def error_response(message: str, status: int) -> tuple:
    """Error envelope ``{"error": message}`` with an HTTP status.

    Args:
        message: Error message
        status: HTTP status code

    Returns:
        Flask response tuple
    """
    return jsonify({"error": message}), status
