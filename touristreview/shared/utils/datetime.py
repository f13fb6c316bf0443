"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the system should be timezone-aware UTC.
Use these helpers instead of datetime.now() or datetime.utcnow().
"""

from datetime import UTC, datetime

# Ratings store their date as a display string, not a timestamp.
RATING_DATE_FORMAT = "%m/%d/%Y"


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Args:
        dt: A datetime that may be naive or aware

    Returns:
        UTC-aware datetime or None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def format_rating_date(dt: datetime | None = None) -> str:
    """
    Format a datetime the way rating documents store it ("MM/dd/yyyy").

    Args:
        dt: Datetime to format; defaults to now (UTC)

    Returns:
        Date string such as "03/27/2024"
    """
    return ensure_utc(dt or utc_now()).strftime(RATING_DATE_FORMAT)
