"""UTC clock used to stamp bookmarks writes.

Timestamps are rendered in a fixed-width ISO-8601 form with microseconds
and a ``Z`` suffix, so that string order equals time order.
"""

from datetime import datetime, timezone

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def format_timestamp(moment: datetime) -> str:
    """Render an aware datetime as a sortable UTC timestamp string."""
    if moment.tzinfo is None:
        raise ValueError("Timestamp must be timezone-aware")
    return moment.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    """Parse a timestamp produced by format_timestamp."""
    return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


class UtcClock:
    """Wall clock returning UTC timestamp strings."""

    def now(self) -> str:
        return format_timestamp(datetime.now(timezone.utc))
