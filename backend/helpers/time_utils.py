"""
UTC helpers.

SQLite hands back naive datetimes even for values written as UTC-aware, so
any comparison against "now" goes through ensure_utc first.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Treat naive datetimes as UTC.

    Args:
        dt: Datetime from the database or caller, or None

    Returns:
        Timezone-aware datetime in UTC, or None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
