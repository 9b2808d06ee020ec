"""
Calendar Helpers

Local-time day, week, and month boundaries. "Local" means the timezone of
the ``now`` passed by the caller; aware session timestamps are converted
into it, naive ones are taken as already local.
"""

from datetime import date, datetime, timedelta

SECONDS_PER_DAY = 86400


def to_local(dt: datetime, now: datetime) -> datetime:
    """Express ``dt`` in the same timezone as ``now``."""
    if dt.tzinfo is not None and now.tzinfo is not None:
        return dt.astimezone(now.tzinfo)
    if dt.tzinfo is not None and now.tzinfo is None:
        return dt.astimezone().replace(tzinfo=None)
    if dt.tzinfo is None and now.tzinfo is not None:
        return dt.replace(tzinfo=now.tzinfo)
    return dt


def local_date(dt: datetime, now: datetime) -> date:
    return to_local(dt, now).date()


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(now: datetime) -> datetime:
    """Sunday 00:00 of the week containing ``now``."""
    # weekday(): Monday=0 .. Sunday=6
    days_since_sunday = (now.weekday() + 1) % 7
    return start_of_day(now) - timedelta(days=days_since_sunday)


def start_of_month(now: datetime) -> datetime:
    return start_of_day(now).replace(day=1)


def whole_days_between(later: datetime, earlier: datetime) -> int:
    """Floor of the elapsed time in days."""
    return int((later - earlier).total_seconds() // SECONDS_PER_DAY)


def trailing_days(now: datetime, days: int):
    """Start-of-day datetimes for the last ``days`` days, oldest first, ending today."""
    today = start_of_day(now)
    return [today - timedelta(days=days - 1 - i) for i in range(days)]
