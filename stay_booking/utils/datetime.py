"""UTC and local-calendar datetime utilities."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from stay_booking.config import LOCAL_TIMEZONE

LOCAL_TZ = ZoneInfo(LOCAL_TIMEZONE)


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-aware datetime.

    This function should be used instead of datetime.now() or datetime.utcnow()
    to ensure all timestamps are timezone-aware and stored in UTC.

    Returns:
        Timezone-aware datetime in UTC

    Example:
        >>> now = utc_now()
        >>> now.tzinfo
        datetime.timezone.utc
    """
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """
    Normalize a datetime to aware UTC.

    SQLite returns naive datetimes for timezone-aware columns; those are
    treated as already being in UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_today(now: datetime | None = None) -> date:
    """Calendar date of `now` (default: current time) in the configured local zone."""
    return ensure_utc(now or utc_now()).astimezone(LOCAL_TZ).date()


def local_midnight(day: date) -> datetime:
    """Aware UTC datetime for the start of `day` in the configured local zone."""
    return datetime.combine(day, time.min, tzinfo=LOCAL_TZ).astimezone(timezone.utc)


def nights_between(check_in: date, check_out: date) -> int:
    """
    Number of inventory nights in [check_in, check_out), never less than 1.

    Dates carry no time component, so the day difference is already the
    ceiling of the elapsed days.
    """
    return max(1, (check_out - check_in).days)


def iter_nights(check_in: date, check_out: date):
    """Yield each calendar night in [check_in, check_out) in chronological order."""
    night = check_in
    while night < check_out:
        yield night
        night += timedelta(days=1)
