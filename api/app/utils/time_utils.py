"""
Time utility functions.

All timestamps in the database are naive UTC datetimes.
"""
from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    """Current UTC wall-clock time as a naive datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def add_days(base_time: datetime, days: int) -> datetime:
    """
    Add whole calendar days to a timestamp, keeping the time of day.

    On the UTC clock a calendar day is always 24 hours, so this matches
    date arithmetic without daylight-saving shifts.
    """
    return base_time + timedelta(days=days)
