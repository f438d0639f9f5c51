"""
Relative time windows used by the history, stats and trends views.

Every function takes `now` explicitly. An aware `now` makes its zone the
"local" zone for calendar-day boundaries; a naive `now` means the host's
local time.
"""
from datetime import datetime, timedelta
from enum import Enum


class TimeRange(Enum):
    TODAY = 'today'
    WEEK = 'week'
    MONTH = 'month'
    THREE_MONTHS = '3months'
    YEAR = 'year'
    ALL = 'all'

    @classmethod
    def parse(cls, value, default=None):
        """Look up a range by its query-string value."""
        if value is None or value == '':
            if default is None:
                raise ValueError('Time range is required')
            return default
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ', '.join(r.value for r in cls)
            raise ValueError(f'Invalid range "{value}". Use one of: {valid}')


_DAYS_BACK = {
    TimeRange.WEEK: 7,
    TimeRange.MONTH: 30,
    TimeRange.THREE_MONTHS: 90,
    TimeRange.YEAR: 365,
}


def to_millis(dt: datetime) -> int:
    return round(dt.timestamp() * 1000)


def local_datetime(timestamp_ms: int, tz=None) -> datetime:
    """Convert epoch milliseconds to a datetime in `tz` (naive local time when None)."""
    return datetime.fromtimestamp(timestamp_ms / 1000, tz)


def start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=23, minute=59, second=59, microsecond=999000)


def range_bounds(time_range: TimeRange, now: datetime):
    """Return the inclusive (start_ms, end_ms) window, or None for TimeRange.ALL."""
    if time_range is TimeRange.ALL:
        return None
    if time_range is TimeRange.TODAY:
        start = start_of_day(now)
    else:
        # Wall-clock subtraction: same time of day N calendar days ago,
        # even across a DST change.
        start = now - timedelta(days=_DAYS_BACK[time_range])
    return to_millis(start), to_millis(end_of_day(now))


def filter_by_range(readings, time_range: TimeRange, now: datetime) -> list:
    """Return the readings whose timestamp falls inside the window, in their original order."""
    bounds = range_bounds(time_range, now)
    if bounds is None:
        return list(readings)
    start_ms, end_ms = bounds
    return [r for r in readings if start_ms <= r.timestamp <= end_ms]
