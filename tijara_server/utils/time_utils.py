from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Return the current time as a naive UTC datetime at millisecond precision.

    This is the single source of truth for stored timestamps. MongoDB keeps
    milliseconds only and pymongo hands back naive UTC values, so truncating
    here keeps in-memory objects equal to what a later read returns.
    """
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """Format a stored (naive UTC) datetime as ISO-8601 with a Z suffix."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt.isoformat(timespec='milliseconds') + 'Z'
