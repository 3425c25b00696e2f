"""
Timestamp helpers.

Stored timestamps are fixed-width UTC ISO-8601 strings with millisecond
precision (``2026-10-18T09:15:02.123Z``), so string order equals time order.
All "today" computations use the server's local calendar day.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional


@dataclass(frozen=True)
class TimeRange:
    """Inclusive range over stored timestamps; either bound may be open."""
    start: Optional[str] = None
    end: Optional[str] = None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def local_day_window(now: Optional[datetime] = None) -> TimeRange:
    """[start of the current local day, now] as stored-timestamp bounds."""
    now = now or utc_now()
    local_now = now.astimezone()
    # Midnight carries its own UTC offset, which differs from now on DST change days
    start_of_day = datetime.combine(local_now.date(), time.min).astimezone()
    return TimeRange(start=to_iso(start_of_day), end=to_iso(now))


def local_date_range(start: Optional[date] = None, end: Optional[date] = None) -> TimeRange:
    """Inclusive local calendar dates as stored-timestamp bounds."""
    start_iso = None
    end_iso = None
    if start:
        start_iso = to_iso(datetime.combine(start, time.min))
    if end:
        next_day = datetime.combine(end + timedelta(days=1), time.min)
        end_iso = to_iso(next_day - timedelta(milliseconds=1))
    return TimeRange(start=start_iso, end=end_iso)
