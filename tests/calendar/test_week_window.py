"""Tests for the 7-week calendar window."""

from datetime import date, datetime, timedelta

import pytest

from app.calendar.weeks import (
    WeekBucket,
    calculate_week_range,
    is_date_in_week,
    locate_week,
    monday_of,
)


class TestCalculateWeekRange:
    def test_mid_week_reference(self):
        """Wednesday 2025-01-15 anchors on Monday 2025-01-13."""
        window = calculate_week_range("2025-01-15")
        by_offset = {bucket.offset: bucket for bucket in window}

        assert by_offset[0].monday_date == date(2025, 1, 13)
        assert by_offset[-2].monday_date == date(2024, 12, 30)
        assert by_offset[4].monday_date == date(2025, 2, 10)
        assert by_offset[0].label == "13/01"

    def test_seven_buckets_ordered_by_offset(self):
        window = calculate_week_range(date(2025, 1, 15))
        assert [bucket.offset for bucket in window] == [-2, -1, 0, 1, 2, 3, 4]

    def test_mondays_step_by_seven_days(self):
        window = calculate_week_range(date(2024, 2, 29))
        for prev, nxt in zip(window, window[1:]):
            assert nxt.monday_date - prev.monday_date == timedelta(days=7)

    def test_bucket_bounds(self):
        for bucket in calculate_week_range(date(2025, 6, 1)):
            assert bucket.start_date == bucket.monday_date
            assert bucket.end_date == bucket.monday_date + timedelta(days=6)
            assert bucket.monday_date.weekday() == 0

    def test_window_is_contiguous_49_days(self):
        window = calculate_week_range(date(2025, 3, 20))
        assert window[-1].end_date - window[0].start_date == timedelta(days=48)
        for prev, nxt in zip(window, window[1:]):
            assert nxt.start_date == prev.end_date + timedelta(days=1)

    def test_monday_reference_is_its_own_week(self):
        window = calculate_week_range(date(2025, 1, 13))
        assert window[2].offset == 0
        assert window[2].monday_date == date(2025, 1, 13)

    def test_sunday_reference_belongs_to_previous_monday(self):
        window = calculate_week_range(date(2025, 1, 19))
        assert window[2].monday_date == date(2025, 1, 13)

    def test_datetime_reference(self):
        window = calculate_week_range(datetime(2025, 1, 15, 23, 30))
        assert window[2].monday_date == date(2025, 1, 13)

    def test_datetime_string_reference(self):
        window = calculate_week_range("2025-01-15T10:00:00")
        assert window[2].monday_date == date(2025, 1, 13)

    def test_label_is_day_month(self):
        window = calculate_week_range(date(2024, 11, 6))
        assert window[2].label == "04/11"

    def test_invalid_string_raises(self):
        with pytest.raises(ValueError):
            calculate_week_range("not-a-date")

    def test_buckets_are_immutable(self):
        bucket = calculate_week_range(date(2025, 1, 15))[0]
        with pytest.raises(AttributeError):
            bucket.offset = 3  # type: ignore[misc]


class TestLocateWeek:
    @pytest.fixture
    def window(self) -> list[WeekBucket]:
        return calculate_week_range(date(2025, 1, 15))

    def test_every_day_in_span_maps_to_containing_offset(self, window):
        day = window[0].start_date
        while day <= window[-1].end_date:
            offset = locate_week(day, window)
            matching = [b.offset for b in window if b.start_date <= day <= b.end_date]
            assert matching == [offset]
            day += timedelta(days=1)

    def test_bounds_are_inclusive(self, window):
        assert locate_week(date(2025, 1, 13), window) == 0
        assert locate_week(date(2025, 1, 19), window) == 0
        assert locate_week(date(2025, 1, 20), window) == 1

    def test_outside_span_returns_none(self, window):
        assert locate_week(window[0].start_date - timedelta(days=1), window) is None
        assert locate_week(window[-1].end_date + timedelta(days=1), window) is None

    def test_empty_window(self):
        assert locate_week(date(2025, 1, 15), []) is None


class TestMondayOf:
    @pytest.mark.parametrize(
        ("day", "expected"),
        [
            (date(2025, 1, 13), date(2025, 1, 13)),
            (date(2025, 1, 15), date(2025, 1, 13)),
            (date(2025, 1, 19), date(2025, 1, 13)),
            (date(2025, 1, 1), date(2024, 12, 30)),
        ],
    )
    def test_monday_on_or_before(self, day, expected):
        assert monday_of(day) == expected


def test_is_date_in_week():
    bucket = calculate_week_range(date(2025, 1, 15))[2]
    assert is_date_in_week(date(2025, 1, 13), bucket)
    assert is_date_in_week("2025-01-19", bucket)
    assert not is_date_in_week(date(2025, 1, 20), bucket)
