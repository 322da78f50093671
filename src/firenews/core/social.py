"""
Social network page/group feed client (Graph API shape).
"""

import re
from datetime import datetime
from typing import Any, Mapping, Optional
from zoneinfo import ZoneInfo

import httpx

from firenews.config import SocialConfig, get_config
from firenews.core.classifier import cjk_normalize
from firenews.core.feed_filter import compile_include
from firenews.exceptions import SocialFeedError
from firenews.logger import get_logger
from firenews.models.item import ZERO_TIME, SocialPost

logger = get_logger(__name__)

GRAPH_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

PAGE_TYPE = "pg"


def parse_graph_time(value: Any) -> Optional[datetime]:
    """Parse a Graph API timestamp such as ``2017-03-01T08:30:00+0000``."""
    if not value:
        return None
    try:
        return datetime.strptime(str(value), GRAPH_TIME_FORMAT)
    except ValueError:
        return None


def permalink(gid: str, pid: str, page_type: Optional[str]) -> str:
    """Public link of a post on a page (``pg``) or in a group (anything else)."""
    if page_type == PAGE_TYPE:
        return f"https://www.facebook.com/permalink.php?story_fbid={pid}&id={gid}"
    return f"https://www.facebook.com/groups/{gid}/permalink/{pid}/"


class SocialFeedClient:
    """Lists recent posts of a page or group."""

    def __init__(
        self,
        config: Optional[SocialConfig] = None,
        timezone: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        replacements: Optional[Mapping[str, str]] = None,
    ):
        """Initialize social feed client.

        Args:
            config: Social feed configuration (Graph URL, app credentials)
            timezone: Reference timezone for post times
            client: HTTP client to reuse instead of one client per call
            replacements: CJK look-alike replacements applied before matching
        """
        app_config = get_config()
        self.config = config or app_config.social
        self.tz = ZoneInfo(timezone or app_config.pipeline.timezone)
        self.replacements = replacements
        self._client = client

    def _get(self, path: str) -> dict:
        """GET a Graph API object.

        Raises:
            SocialFeedError: On transport errors, non-JSON bodies or API errors
        """
        token = self.config.access_token
        if not token:
            raise SocialFeedError("Social feed credentials are not configured")

        url = f"{self.config.graph_url.rstrip('/')}/{path.lstrip('/')}"
        params = {"access_token": token}
        try:
            if self._client is not None:
                response = self._client.get(url, params=params, timeout=self.config.timeout_seconds)
            else:
                with httpx.Client(timeout=self.config.timeout_seconds) as client:
                    response = client.get(url, params=params)
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise SocialFeedError(f"Graph request for {path} failed: {type(e).__name__}: {e}") from e

        if not isinstance(data, dict):
            raise SocialFeedError(f"Unexpected Graph response for {path}")
        if "error" in data:
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else error
            raise SocialFeedError(f"Graph error for {path}: {message}")
        if response.status_code >= 400:
            raise SocialFeedError(f"Graph request for {path} returned HTTP {response.status_code}")
        return data

    def list_posts(self, page_id: str, page_type: Optional[str] = None) -> list[SocialPost]:
        """List the first page of posts of a page or group.

        Args:
            page_id: Page or group ID
            page_type: ``"pg"`` for a page, anything else for a group

        Returns:
            Posts in API order

        Raises:
            SocialFeedError: If the Graph API call fails
        """
        feed = self._get(f"{page_id}/feed")
        owner = self._get(page_id)
        source = str(owner.get("name") or page_id)

        posts = []
        for result in feed.get("data") or []:
            when = parse_graph_time(result.get("created_time")) or parse_graph_time(result.get("updated_time"))
            when = when.astimezone(self.tz) if when else ZERO_TIME

            gid, _, pid = str(result.get("id") or "").partition("_")
            link = permalink(gid, pid, page_type)
            posts.append(
                SocialPost(
                    gid=gid,
                    pid=pid,
                    message=result.get("message") or "",
                    story=result.get("story") or "",
                    time=when,
                    link=link,
                    origin_link=link,
                    source=source,
                )
            )

        logger.info(f"Fetched {len(posts)} posts from {source} ({page_id})")
        return posts

    def filter_posts(self, posts: list[SocialPost], include: Optional[str] = None) -> list[SocialPost]:
        """Keep posts whose message matches ``include``, most recent first.

        Raises:
            InvalidPatternError: If ``include`` is not a valid pattern
        """
        pattern: re.Pattern = compile_include(include)
        kept = [post for post in posts if pattern.search(cjk_normalize(post.message, self.replacements))]
        return sorted(kept, key=lambda post: post.time, reverse=True)
