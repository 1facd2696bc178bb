"""
CaseDesk Legal - Timestamp Utilities

All timestamps are stored as naive UTC. The wire format is ISO-8601 with a
trailing "Z".
"""

from datetime import date, datetime, timezone
from typing import Optional, Union


def now_utc() -> datetime:
    """Return the current time as naive UTC (compatible with database datetimes).

    Non-deprecated replacement for the old utcnow pattern.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC."""
    if dt is None or dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def to_iso(value: Union[datetime, date]) -> str:
    """
    Format a stored date or datetime for the wire.

    Args:
        value: A naive UTC datetime, an aware datetime, or a plain date.

    Returns:
        ISO-8601 string; datetimes are rendered in UTC with a "Z" suffix.
    """
    if not isinstance(value, datetime):
        return value.isoformat()
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")
