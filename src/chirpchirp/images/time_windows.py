"""Time range resolution for image listings.

Maps the symbolic ``timeRange`` query tokens to a lower bound on the image
capture timestamp. Tokens are case-sensitive; anything unrecognized behaves
like ``All``.
"""

from datetime import UTC, datetime, timedelta
from enum import Enum


class TimeRange(str, Enum):
    """Time range tokens accepted by the image listing."""

    DAY = "1D"
    WEEK = "7D"
    MONTH = "1M"
    QUARTER = "3M"
    YEAR = "1YR"
    ALL = "All"

    # Fallback for unrecognized tokens (alias to ALL)
    DEFAULT = ALL


TIME_RANGE_OFFSETS: dict[TimeRange, timedelta] = {
    TimeRange.DAY: timedelta(days=1),
    TimeRange.WEEK: timedelta(days=7),
    TimeRange.MONTH: timedelta(days=30),
    TimeRange.QUARTER: timedelta(days=90),
    TimeRange.YEAR: timedelta(days=365),
}


def parse_time_range(token: TimeRange | str | None) -> TimeRange:
    """Convert a raw token to a TimeRange, falling back to ALL."""
    if isinstance(token, TimeRange):
        return token
    try:
        return TimeRange(token)
    except ValueError:
        return TimeRange.DEFAULT


def resolve_time_window(
    token: TimeRange | str | None, now: datetime | None = None
) -> datetime | None:
    """Resolve a time range token to the earliest capture time to include.

    Args:
        token: Time range token (1D, 7D, 1M, 3M, 1YR, All)
        now: Reference datetime (defaults to current UTC time)

    Returns:
        The lower bound, or None when the range is unbounded
    """
    offset = TIME_RANGE_OFFSETS.get(parse_time_range(token))
    if offset is None:
        return None

    if now is None:
        now = datetime.now(UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    return now - offset
