"""
UTC day-window helpers for daily log exports.

Exports are partitioned by UTC calendar day. A window is the half-open
interval [start, end) between two consecutive UTC midnights.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class TimeWindow:
    """Half-open UTC interval covering exactly one calendar day."""

    start: datetime
    end: datetime

    @property
    def day(self) -> date:
        return self.start.date()

    @property
    def label(self) -> str:
        """Day label used in archive filenames (YYYY-MM-DD)."""
        return self.day.isoformat()


def _as_utc(moment: datetime) -> datetime:
    # Naive datetimes are taken to already be in UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def utc_range_for_day(day: date) -> TimeWindow:
    """
    Get the window covering a single UTC calendar day.

    Args:
        day: Calendar day to cover

    Returns:
        TimeWindow from that day's midnight to the next midnight
    """
    start = datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
    return TimeWindow(start=start, end=start + ONE_DAY)


def utc_range_for_yesterday(now: Optional[datetime] = None) -> TimeWindow:
    """
    Get the window for the UTC day before `now`.

    Args:
        now: Reference instant (default: current time). Naive values are UTC.

    Returns:
        TimeWindow whose end is the latest UTC midnight at or before `now`
    """
    if now is None:
        now = datetime.now(timezone.utc)
    now = _as_utc(now)

    end = datetime(now.year, now.month, now.day, tzinfo=timezone.utc)
    return TimeWindow(start=end - ONE_DAY, end=end)


def parse_day(value: str) -> date:
    """Parse a YYYY-MM-DD string into a date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(f"Invalid date {value!r}, expected YYYY-MM-DD")


def to_clickhouse_datetime64(moment: datetime) -> str:
    """
    Render a UTC instant for ClickHouse's toDateTime64().

    ClickHouse accepts ISO-like strings without the trailing zone marker,
    so the value is converted to UTC and the offset is dropped.
    """
    naive_utc = _as_utc(moment).replace(tzinfo=None)
    return naive_utc.isoformat(timespec="milliseconds")
