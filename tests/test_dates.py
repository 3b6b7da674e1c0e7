"""
Tests for date and slot key helpers.
"""

from datetime import date, datetime

import pendulum
import pytest

from bookingengine.domain.dates import (
    as_date,
    date_from_upstream,
    date_range,
    format_date_key,
    format_schedule,
    format_time_slot,
    parse_date_key,
    parse_time_slot,
    slot_key,
    split_slot_key,
)


class TestDateKeys:
    """Tests for YYYY-MM-DD keys."""

    def test_format_pads_month_and_day(self):
        assert format_date_key(pendulum.date(2024, 6, 5)) == "2024-06-05"

    def test_format_accepts_stdlib_date(self):
        assert format_date_key(date(2023, 12, 31)) == "2023-12-31"

    def test_late_evening_datetime_keeps_its_calendar_day(self):
        """A local 23:30 must not roll over to the next day's key."""
        assert format_date_key(datetime(2024, 6, 10, 23, 30)) == "2024-06-10"

    @pytest.mark.parametrize(
        "value",
        [
            pendulum.date(2024, 1, 1),
            pendulum.date(2024, 2, 29),
            pendulum.date(2024, 12, 31),
            pendulum.date(1999, 7, 4),
        ],
    )
    def test_parse_inverts_format(self, value):
        assert parse_date_key(format_date_key(value)) == value

    @pytest.mark.parametrize("key", ["2024-6-5", "2024/06/05", "20240605", "", "2024-02-30"])
    def test_parse_rejects_malformed_keys(self, key):
        with pytest.raises(ValueError):
            parse_date_key(key)

    def test_as_date_returns_pendulum_date(self):
        value = as_date(date(2024, 6, 10))

        assert isinstance(value, pendulum.Date)
        assert value == pendulum.date(2024, 6, 10)

    def test_as_date_drops_time_of_pendulum_datetime(self):
        value = as_date(pendulum.datetime(2024, 6, 10, 15, 45, tz="Asia/Jakarta"))

        assert type(value) is pendulum.Date
        assert value == pendulum.date(2024, 6, 10)


class TestUpstreamDates:
    """Tests for dates arriving from the backend."""

    def test_timestamp_crossing_midnight(self):
        assert date_from_upstream("2024-06-09T17:00:00.000Z", "Asia/Jakarta") == pendulum.date(2024, 6, 10)
        assert date_from_upstream("2024-06-09T17:00:00.000Z", "UTC") == pendulum.date(2024, 6, 9)

    def test_offset_timestamp(self):
        assert date_from_upstream("2024-06-10T01:00:00+07:00", "UTC") == pendulum.date(2024, 6, 9)

    def test_date_key_is_not_shifted(self):
        assert date_from_upstream("2024-06-09", "Pacific/Kiritimati") == pendulum.date(2024, 6, 9)

    @pytest.mark.parametrize("value", ["", "soon", None])
    def test_rejects_unreadable_values(self, value):
        with pytest.raises(ValueError):
            date_from_upstream(value)


class TestTimeSlots:
    """Tests for HH:MM parsing and slot keys."""

    def test_parse_time_slot(self):
        assert parse_time_slot("09:30") == (9, 30)
        assert parse_time_slot("16:00") == (16, 0)

    @pytest.mark.parametrize("text", ["9:30", "24:00", "12:60", "noon", ""])
    def test_parse_time_slot_rejects_invalid(self, text):
        with pytest.raises(ValueError):
            parse_time_slot(text)

    def test_format_time_slot_pads_fields(self):
        assert format_time_slot(9, 5) == "09:05"
        assert format_time_slot(16, 30) == "16:30"

    def test_slot_key_joins_date_and_time(self):
        assert slot_key(pendulum.date(2024, 6, 10), "10:00") == "2024-06-10-10:00"

    def test_split_slot_key(self):
        day, time_slot = split_slot_key("2024-06-10-13:30")

        assert day == pendulum.date(2024, 6, 10)
        assert time_slot == "13:30"

    @pytest.mark.parametrize("key", ["2024-06-10 13:30", "2024-06-10-1330", "2024-06-10"])
    def test_split_slot_key_rejects_malformed(self, key):
        with pytest.raises(ValueError):
            split_slot_key(key)


class TestRanges:
    """Tests for date ranges and schedule labels."""

    def test_date_range_crosses_month_end(self):
        days = date_range(pendulum.date(2024, 1, 30), 3)

        assert [format_date_key(d) for d in days] == ["2024-01-30", "2024-01-31", "2024-02-01"]

    def test_single_day_schedule_shows_time(self):
        day = pendulum.date(2024, 6, 10)
        assert format_schedule(day, day, "10:00") == "2024-06-10 - 10:00"

    def test_multi_day_schedule_shows_range(self):
        label = format_schedule(pendulum.date(2024, 6, 10), pendulum.date(2024, 6, 12), "09:00")
        assert label == "2024-06-10 s/d 2024-06-12"
