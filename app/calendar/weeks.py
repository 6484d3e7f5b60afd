"""Seven-week calendar window used by the allocation grid.

The grid shows two weeks before the reference week, the reference week
itself and four weeks after it. Weeks start on Monday.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

WEEK_OFFSETS = range(-2, 5)


@dataclass(frozen=True)
class WeekBucket:
    """One 7-day column of the grid."""

    offset: int
    monday_date: date
    start_date: date
    end_date: date
    label: str


def _as_date(value: date | datetime | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip()[:10])


def monday_of(day: date | datetime | str) -> date:
    """Return the Monday on or before the given day."""
    d = _as_date(day)
    return d - timedelta(days=d.weekday())


def calculate_week_range(reference_date: date | datetime | str) -> list[WeekBucket]:
    """Build the 7 buckets (offsets -2..+4) around the reference date.

    Args:
        reference_date: Date, datetime or ISO "YYYY-MM-DD" string

    Returns:
        Buckets ordered by offset, covering 49 contiguous days
    """
    week0 = monday_of(reference_date)
    weeks = []
    for offset in WEEK_OFFSETS:
        monday = week0 + timedelta(days=7 * offset)
        weeks.append(
            WeekBucket(
                offset=offset,
                monday_date=monday,
                start_date=monday,
                end_date=monday + timedelta(days=6),
                label=monday.strftime("%d/%m"),
            )
        )
    return weeks


def is_date_in_week(day: date | datetime | str, bucket: WeekBucket) -> bool:
    d = _as_date(day)
    return bucket.start_date <= d <= bucket.end_date


def locate_week(day: date | datetime | str, window: list[WeekBucket]) -> int | None:
    """Return the offset of the bucket containing day, or None if outside the window."""
    d = _as_date(day)
    for bucket in window:
        if bucket.start_date <= d <= bucket.end_date:
            return bucket.offset
    return None
