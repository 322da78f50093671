"""
Timestamp normalization for feed items.

Feeds publish dates in many shapes. Layouts are tried in order and the first
one that parses wins, so more specific layouts must come before layouts that
would also accept a prefix of them.
"""

from datetime import datetime, timedelta, timezone
from typing import Mapping, Optional
from zoneinfo import ZoneInfo

from firenews.logger import get_logger
from firenews.models.item import ZERO_TIME

logger = get_logger(__name__)

# (strptime format, whether the layout carries no offset and means UTC)
DATE_LAYOUTS: tuple[tuple[str, bool], ...] = (
    ("%Y-%m-%dT%H:%M:%S%z", False),             # 2006-01-02T15:04:05Z, 2006-01-02T15:04:05-07:00
    ("%Y-%m-%dT%H:%M:%S.%f%z", False),          # 2006-01-02T15:04:05.000+08:00
    ("%a, %d %b %Y %H:%M:%S %z", False),        # Mon, 02 Jan 2006 15:04:05 -0700
    ("%a, %d %b %Y %H:%M:%S GMT", True),        # Mon, 02 Jan 2006 15:04:05 GMT, Mon, 2 Jan 2006 ...
    ("%Y-%m-%d %H:%M:%S", True),                # 2006-01-02 15:04:05
    ("%a,%d %b %Y %H:%M:%S  %z", False),        # Mon,02 Jan 2006 15:04:05  -0700
    ("%Y-%m-%d %H:%M:%S %z UTC", False),        # 2006-01-02 15:04:05 -0700 UTC
)


def parse_datetime(text: str) -> Optional[datetime]:
    """Parse a date-time string with the known layouts.

    Args:
        text: Raw date-time string

    Returns:
        Timezone-aware datetime, or None if no layout matches
    """
    text = (text or "").strip()
    if not text:
        return None

    for fmt, assume_utc in DATE_LAYOUTS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        if assume_utc or parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    return None


class TimestampNormalizer:
    """Resolve raw feed timestamps to instants in one reference timezone."""

    def __init__(
        self,
        reference_tz: str = "Asia/Taipei",
        corrections: Optional[Mapping[str, float]] = None,
    ):
        """Initialize timestamp normalizer.

        Args:
            reference_tz: IANA name of the timezone all instants are expressed in
            corrections: Feed tag -> hours added after conversion, for feeds
                that publish a wrong offset
        """
        self.reference_tz = ZoneInfo(reference_tz)
        self.corrections = dict(corrections or {})

    def normalize(
        self,
        published: str,
        tag: str = "",
        extensions: Optional[Mapping[str, str]] = None,
    ) -> datetime:
        """Normalize one item's timestamp.

        Args:
            published: Published date string, possibly empty
            tag: Feed tag, used to look up a fixed correction
            extensions: Extension fields; ``updated`` stands in for an empty
                published string

        Returns:
            Aware datetime in the reference timezone, or ZERO_TIME when the
            string matches no known layout
        """
        text = published
        if not (text or "").strip() and extensions:
            text = extensions.get("updated") or ""

        parsed = parse_datetime(text)
        if parsed is None:
            logger.warning(f"Failed to parse date: {text!r} (tag: {tag})")
            return ZERO_TIME

        local = parsed.astimezone(self.reference_tz)

        offset = self.corrections.get(tag)
        if offset:
            local = local + timedelta(hours=offset)

        return local
