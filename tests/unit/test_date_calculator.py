"""Unit tests for rental date arithmetic."""

from datetime import date, datetime, timezone

import pytest

from shared.services.date_calculator import (
    ReturnStatus,
    analyze_return_status,
    calculate_chargeable_days,
    parse_date,
    rental_period,
    usage_days,
)


class TestChargeableDays:
    """calculate_chargeable_days counts both boundary days."""

    def test_same_day_is_one_day(self):
        assert calculate_chargeable_days(date(2024, 3, 1), date(2024, 3, 1)) == 1

    def test_both_boundaries_count(self):
        assert calculate_chargeable_days(date(2024, 3, 1), date(2024, 3, 5)) == 5

    def test_time_of_day_is_ignored(self):
        start = datetime(2024, 3, 1, 23, 30)
        end = datetime(2024, 3, 2, 0, 15)
        assert calculate_chargeable_days(start, end) == 2

    def test_iso_strings_are_accepted(self):
        assert calculate_chargeable_days("2024-03-01", "2024-03-03T10:00:00Z") == 3

    def test_minimum_days_is_enforced(self):
        assert calculate_chargeable_days(date(2024, 3, 1), date(2024, 3, 2), minimum_days=3) == 3

    def test_end_before_start_returns_minimum(self):
        assert calculate_chargeable_days(date(2024, 3, 5), date(2024, 3, 1)) == 1

    @pytest.mark.parametrize("start,end", [(None, date(2024, 3, 1)), ("not a date", "2024-03-02"), (42, None)])
    def test_unreadable_input_returns_minimum(self, start, end):
        assert calculate_chargeable_days(start, end, minimum_days=2) == 2

    def test_result_never_below_one(self):
        for offset in range(0, 10):
            assert calculate_chargeable_days(date(2024, 1, 1), date(2024, 1, 1 + offset)) >= 1


class TestUsageDays:
    def test_partial_day_rounds_up(self):
        assert usage_days(datetime(2024, 3, 1, 8), datetime(2024, 3, 4, 9)) == 4

    def test_whole_days(self):
        assert usage_days(date(2024, 3, 1), date(2024, 3, 4)) == 3

    def test_same_moment_is_one_day(self):
        assert usage_days(date(2024, 3, 1), date(2024, 3, 1)) == 1

    def test_unreadable_returns_none(self):
        assert usage_days(date(2024, 3, 1), "garbage") is None


class TestReturnStatus:
    """analyze_return_status against planned 2024-03-10 with one grace day."""

    planned = date(2024, 3, 10)

    def test_early(self):
        result = analyze_return_status(date(2024, 3, 8), self.planned)
        assert result.status == ReturnStatus.EARLY
        assert result.is_early and not result.is_late
        assert result.extra_days == 0

    def test_on_time(self):
        result = analyze_return_status(date(2024, 3, 10), self.planned)
        assert result.status == ReturnStatus.ON_TIME
        assert not result.is_within_grace

    def test_grace_period(self):
        result = analyze_return_status(date(2024, 3, 11), self.planned)
        assert result.status == ReturnStatus.GRACE_PERIOD
        assert result.is_within_grace
        assert result.grace_end_date == date(2024, 3, 11)

    def test_late_counts_days_past_grace_end(self):
        result = analyze_return_status(date(2024, 3, 14), self.planned)
        assert result.status == ReturnStatus.LATE
        assert result.is_late
        assert result.extra_days == 3

    def test_wider_grace_window(self):
        result = analyze_return_status(date(2024, 3, 13), self.planned, grace_days=3)
        assert result.status == ReturnStatus.GRACE_PERIOD

    def test_missing_input_is_unknown(self):
        result = analyze_return_status(None, self.planned)
        assert result.status == ReturnStatus.UNKNOWN
        assert not result.is_late and not result.is_early

    def test_unparseable_input_is_unknown(self):
        assert analyze_return_status("31/31/2024", self.planned).status == ReturnStatus.UNKNOWN


def test_parse_date_normalizes_aware_datetimes_to_utc():
    value = datetime(2024, 3, 1, 23, 0, tzinfo=timezone.utc)
    assert parse_date(value) == date(2024, 3, 1)
    assert parse_date("2024-03-01T22:00:00-03:00") == date(2024, 3, 2)


def test_rental_period_duration_text():
    assert rental_period(date(2024, 3, 1), date(2024, 3, 1)).duration == "1 day"
    period = rental_period("2024-03-01", "2024-03-04")
    assert period.chargeable_days == 4
    assert period.duration == "4 days"
    assert rental_period(None, "2024-03-04") is None
