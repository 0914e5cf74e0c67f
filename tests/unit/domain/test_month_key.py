"""Unit tests for MonthKey value object"""

import pytest
from datetime import date, datetime, timedelta, timezone

from src.app.errors import InvalidArgument, InvalidMonthFormat, InvalidMonthRange
from src.domain.month_key import MonthKey, MonthRange, day_key, key_of, range_for


class TestMonthKeyParse:
    """Test parsing YYYY-MM text"""

    @pytest.mark.parametrize("text", ["1900-01", "2024-02", "2025-09", "2100-12"])
    def test_round_trip(self, text):
        """Parsing then formatting returns the original text"""
        assert str(MonthKey.parse(text)) == text

    def test_parse_decomposes_year_and_month(self):
        key = MonthKey.parse("2025-09")

        assert key.year == 2025
        assert key.month == 9

    @pytest.mark.parametrize("text", ["25-01", "2025", "2025-1", "2025/01", "2025-09-01", " 2025-09", ""])
    def test_rejects_malformed_text(self, text):
        with pytest.raises(InvalidMonthFormat):
            MonthKey.parse(text)

    @pytest.mark.parametrize("value", [None, 202509, ("2025", "09")])
    def test_rejects_non_string(self, value):
        with pytest.raises(InvalidMonthFormat):
            MonthKey.parse(value)

    @pytest.mark.parametrize("text", ["2025-13", "2025-00", "1899-12", "2101-01"])
    def test_rejects_out_of_range(self, text):
        with pytest.raises(InvalidMonthRange):
            MonthKey.parse(text)

    def test_month_errors_are_invalid_arguments(self):
        """Month errors map to the caller-error category and name the field"""
        with pytest.raises(InvalidArgument) as exc_info:
            MonthKey.parse("2025-13")

        assert exc_info.value.field == "month_key"
        assert exc_info.value.code == "INVALID_MONTH_RANGE"
        assert "13" in exc_info.value.message

    def test_direct_construction_is_validated(self):
        with pytest.raises(InvalidMonthRange):
            MonthKey(2025, 13)


class TestMonthRange:
    """Test calendar range computation"""

    def test_range_of_regular_month(self):
        month_range = range_for(MonthKey(2025, 9))

        assert month_range.start == datetime(2025, 9, 1, tzinfo=timezone.utc)
        assert month_range.end == datetime(2025, 9, 30, 23, 59, 59, 999999, tzinfo=timezone.utc)

    def test_range_of_leap_february(self):
        assert range_for(MonthKey(2024, 2)).end.day == 29
        assert range_for(MonthKey(2023, 2)).end.day == 28
        assert range_for(MonthKey(1900, 2)).end.day == 28
        assert range_for(MonthKey(2000, 2)).end.day == 29

    def test_range_of_december_does_not_roll_into_next_year(self):
        month_range = range_for(MonthKey(2025, 12))

        assert month_range.start == datetime(2025, 12, 1, tzinfo=timezone.utc)
        assert month_range.end == datetime(2025, 12, 31, 23, 59, 59, 999999, tzinfo=timezone.utc)

    def test_range_contains_bounds(self):
        month_range = MonthKey(2025, 9).range()

        assert isinstance(month_range, MonthRange)
        assert datetime(2025, 9, 1, 0, 0) in month_range
        assert datetime(2025, 9, 30, 23, 59, 59) in month_range
        assert date(2025, 9, 15) in month_range
        assert datetime(2025, 10, 1, 0, 0) not in month_range
        assert datetime(2025, 8, 31, 23, 59, 59) not in month_range

    def test_days_in_month(self):
        assert MonthKey(2024, 2).days_in_month == 29
        assert MonthKey(2025, 4).days_in_month == 30
        assert MonthKey(2025, 1).days_in_month == 31


class TestKeyOf:
    """Test month derivation from dates, normalized to UTC"""

    def test_key_of_naive_datetime(self):
        assert key_of(datetime(2025, 9, 30, 23, 59)) == MonthKey(2025, 9)

    def test_key_of_date(self):
        assert key_of(date(2025, 1, 1)) == MonthKey(2025, 1)

    def test_key_of_aware_datetime_behind_utc(self):
        """Local evening of the 30th is already October in UTC"""
        value = datetime(2025, 9, 30, 23, 30, tzinfo=timezone(timedelta(hours=-2)))

        assert key_of(value) == MonthKey(2025, 10)

    def test_key_of_aware_datetime_ahead_of_utc(self):
        """Paris early morning of the 1st is still the previous month in UTC"""
        value = datetime(2025, 10, 1, 1, 0, tzinfo=timezone(timedelta(hours=2)))

        assert key_of(value) == MonthKey(2025, 9)

    def test_day_key_uses_utc_day(self):
        value = datetime(2025, 9, 16, 1, 0, tzinfo=timezone(timedelta(hours=2)))

        assert day_key(value) == date(2025, 9, 15)
        assert day_key(date(2025, 9, 16)) == date(2025, 9, 16)

    def test_current_month_is_valid(self):
        current = MonthKey.current()

        assert 1 <= current.month <= 12
        assert current == key_of(datetime.now(timezone.utc))


class TestMonthKeyComparison:
    """Test equality, neighbours and membership"""

    def test_is_same(self):
        assert MonthKey.is_same(MonthKey.parse("2025-09"), MonthKey(2025, 9))
        assert not MonthKey.is_same(MonthKey(2025, 9), MonthKey(2024, 9))

    def test_keys_are_hashable_and_ordered(self):
        keys = {MonthKey(2025, 9), MonthKey.parse("2025-09"), MonthKey(2025, 1)}

        assert len(keys) == 2
        assert sorted(keys) == [MonthKey(2025, 1), MonthKey(2025, 9)]

    def test_previous_and_next_roll_over_years(self):
        assert MonthKey(2025, 1).previous() == MonthKey(2024, 12)
        assert MonthKey(2025, 12).next() == MonthKey(2026, 1)
        assert MonthKey(2025, 6).next().previous() == MonthKey(2025, 6)

    def test_contains(self):
        key = MonthKey(2025, 9)

        assert key.contains(datetime(2025, 9, 1))
        assert not key.contains(date(2025, 10, 1))

    def test_immutable(self):
        key = MonthKey(2025, 9)

        with pytest.raises(AttributeError):
            key.month = 10
