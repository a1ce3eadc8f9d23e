"""Tests for src.core.time_normalizer — pure time resolution logic."""

from datetime import datetime

from src.core.time_normalizer import resolve_datetime, resolve_to_iso

NOW = datetime(2024, 1, 1, 10, 0, 0)


class TestClockTimes:
    def test_future_time_stays_today(self):
        assert resolve_to_iso("3pm", now=NOW) == "2024-01-01T15:00:00"

    def test_past_time_rolls_to_tomorrow(self):
        assert resolve_to_iso("9am", now=NOW) == "2024-01-02T09:00:00"

    def test_minutes(self):
        assert resolve_to_iso("5:30 pm", now=NOW) == "2024-01-01T17:30:00"

    def test_24h_without_meridiem(self):
        assert resolve_to_iso("14:45", now=NOW) == "2024-01-01T14:45:00"

    def test_noon_pm_unchanged(self):
        assert resolve_to_iso("12pm", now=NOW) == "2024-01-01T12:00:00"

    def test_midnight_am(self):
        """12 AM maps to hour 0, which has passed, so it rolls over."""
        assert resolve_to_iso("12am", now=NOW) == "2024-01-02T00:00:00"

    def test_uppercase_meridiem(self):
        assert resolve_to_iso("10 AM", now=datetime(2024, 1, 1, 8, 0)) == "2024-01-01T10:00:00"

    def test_exactly_now_is_not_rolled(self):
        assert resolve_to_iso("10am", now=NOW) == "2024-01-01T10:00:00"

    def test_seconds_dropped(self):
        now = datetime(2024, 1, 1, 10, 0, 42, 123456)
        assert resolve_to_iso("11am", now=now) == "2024-01-01T11:00:00"


class TestTomorrow:
    def test_tomorrow_with_time_not_rolled_twice(self):
        assert resolve_to_iso("tomorrow at 3pm", now=NOW) == "2024-01-02T15:00:00"

    def test_tomorrow_with_already_passed_time(self):
        assert resolve_to_iso("tomorrow at 9am", now=NOW) == "2024-01-02T09:00:00"

    def test_tomorrow_without_time_keeps_time_of_day(self):
        assert resolve_to_iso("tomorrow", now=NOW) == "2024-01-02T10:00:00"

    def test_month_boundary(self):
        now = datetime(2024, 1, 31, 22, 0)
        assert resolve_to_iso("tomorrow at 8am", now=now) == "2024-02-01T08:00:00"


class TestNoClock:
    def test_weekday_resolves_to_now(self):
        assert resolve_datetime("monday", now=NOW) == NOW

    def test_tonight_resolves_to_now(self):
        assert resolve_datetime("tonight", now=NOW) == NOW

    def test_out_of_range_hour_ignored(self):
        assert resolve_datetime("25:00", now=NOW) == NOW

    def test_default_now_is_future_or_present(self):
        before = datetime.now()
        result = resolve_datetime("tomorrow")
        assert result > before
