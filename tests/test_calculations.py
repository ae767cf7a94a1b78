#!/usr/bin/env python3
"""Tests for calculation helper functions."""
import pytest
from datetime import date, datetime, timedelta, timezone
from servicetrack import (
    MaintenanceCycle,
    Urgency,
    calc_next_recommended_date,
    calc_progress_percentage,
    calc_years_elapsed,
    classify_urgency,
)


class TestCalcYearsElapsed:
    """Tests for calc_years_elapsed helper function."""

    def test_exact_years(self):
        """365.25 days per year."""
        start = datetime(2016, 10, 16)
        assert calc_years_elapsed(date(2016, 10, 16), start + timedelta(days=3652.5)) == 10.0

    def test_truncates_not_rounds(self):
        """9.99 years is 9.9, not 10.0."""
        now = datetime(2016, 10, 16) + timedelta(days=3649)
        assert calc_years_elapsed(date(2016, 10, 16), now) == 9.9

    def test_one_decimal(self):
        """Half a year in is 0.5."""
        now = datetime(2024, 1, 1) + timedelta(days=183)
        assert calc_years_elapsed(date(2024, 1, 1), now) == 0.5

    def test_same_day(self):
        assert calc_years_elapsed(date(2024, 1, 1), date(2024, 1, 1)) == 0.0

    def test_accepts_date_as_now(self):
        assert calc_years_elapsed(date(2014, 10, 16), date(2026, 10, 16)) == 12.0

    def test_aware_now(self):
        """Timezone-aware reference times compare on wall-clock time."""
        now = datetime(2026, 10, 16, 12, tzinfo=timezone.utc)
        assert calc_years_elapsed(date(2016, 10, 16), now) == 10.0

    def test_future_date_truncates_toward_zero(self):
        """-0.05 years truncates to -0.0, not -0.1."""
        now = datetime(2024, 1, 1)
        assert calc_years_elapsed(date(2024, 1, 19), now) == 0.0


class TestClassifyUrgency:
    """Tests for classify_urgency helper function."""

    @pytest.fixture
    def cycle(self):
        return MaintenanceCycle(early=8, standard=10, late=12)

    def test_low(self, cycle):
        assert classify_urgency(0, cycle) == Urgency.LOW
        assert classify_urgency(7.9, cycle) == Urgency.LOW

    def test_medium_at_early(self, cycle):
        """Lower bound of each tier is inclusive."""
        assert classify_urgency(8.0, cycle) == Urgency.MEDIUM
        assert classify_urgency(9.9, cycle) == Urgency.MEDIUM

    def test_high_at_standard(self, cycle):
        assert classify_urgency(10.0, cycle) == Urgency.HIGH
        assert classify_urgency(11.9, cycle) == Urgency.HIGH

    def test_overdue_at_late(self, cycle):
        assert classify_urgency(12.0, cycle) == Urgency.OVERDUE
        assert classify_urgency(40, cycle) == Urgency.OVERDUE


class TestCalcNextRecommendedDate:
    """Tests for calc_next_recommended_date helper function."""

    def test_calendar_years(self):
        """last + standard years, same month and day."""
        assert calc_next_recommended_date(date(2015, 10, 16), 10) == date(2025, 10, 16)

    def test_leap_day(self):
        """Feb 29 lands on Feb 28 in a non-leap year."""
        assert calc_next_recommended_date(date(2020, 2, 29), 3) == date(2023, 2, 28)

    def test_leap_day_ten_years(self):
        """Day-of-month is clamped rather than rolled into March."""
        assert calc_next_recommended_date(date(2020, 2, 29), 10) == date(2030, 2, 28)
        assert calc_next_recommended_date(date(2020, 2, 29), 4) == date(2024, 2, 29)

    def test_fractional_years(self):
        """Fraction of a year becomes months."""
        assert calc_next_recommended_date(date(2020, 1, 15), 2.5) == date(2022, 7, 15)


class TestCalcProgressPercentage:
    """Tests for calc_progress_percentage helper function."""

    def test_partial(self):
        assert calc_progress_percentage(5.0, 10) == 50.0

    def test_clamped_at_100(self):
        assert calc_progress_percentage(11.0, 10) == 100.0
        assert calc_progress_percentage(1000.0, 10) == 100.0

    def test_clamped_at_0(self):
        assert calc_progress_percentage(-0.5, 10) == 0.0
