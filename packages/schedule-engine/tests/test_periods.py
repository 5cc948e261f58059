"""Tests for ISO-8601 period and time-of-day parsing."""

from __future__ import annotations

from datetime import UTC, datetime, time

import pytest
from bridge_schedule_engine.periods import is_zero, parse_period, parse_time_of_day
from dateutil.relativedelta import relativedelta


class TestParsePeriod:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("P3D", relativedelta(days=3)),
            ("P1M", relativedelta(months=1)),
            ("P3W", relativedelta(weeks=3)),
            ("PT1H", relativedelta(hours=1)),
            ("P1Y2M10DT2H30M", relativedelta(years=1, months=2, days=10, hours=2, minutes=30)),
            ("pt90s", relativedelta(seconds=90)),
        ],
    )
    def test_valid_periods(self, text, expected):
        assert parse_period(text) == expected

    @pytest.mark.parametrize("text", ["", "P", "PT", "P1DT", "3D", "P1H", "P-1D", "P1.5D"])
    def test_invalid_periods(self, text):
        with pytest.raises(ValueError):
            parse_period(text)

    def test_month_is_calendar_aware(self):
        jan_31 = datetime(2026, 1, 31, 10, 0, tzinfo=UTC)
        assert jan_31 + parse_period("P1M") == datetime(2026, 2, 28, 10, 0, tzinfo=UTC)

    def test_zero_detection(self):
        assert is_zero(parse_period("P0D"))
        assert not is_zero(parse_period("PT1M"))


class TestParseTimeOfDay:
    def test_hours_and_minutes(self):
        assert parse_time_of_day("06:00") == time(6, 0)

    def test_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_time_of_day("25:00")

    def test_rejects_offsets(self):
        with pytest.raises(ValueError):
            parse_time_of_day("10:00+02:00")
