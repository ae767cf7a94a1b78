"""Helper functions for maintenance urgency calculations."""

import math
from datetime import date, datetime
from dateutil.relativedelta import relativedelta
from typing import Union

from .cycle import MaintenanceCycle
from .urgency import Urgency

DAYS_PER_YEAR = 365.25
SECONDS_PER_YEAR = DAYS_PER_YEAR * 24 * 60 * 60


def _as_datetime(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        # Service dates are naive calendar dates; compare wall-clock time
        return value.replace(tzinfo=None)
    return datetime(value.year, value.month, value.day)


def calc_years_elapsed(last_date: date, now: Union[date, datetime]) -> float:
    """
    Fractional years from last_date to now, truncated to one decimal.

    Truncates toward zero at 0.1 granularity; 9.99 years is 9.9, never 10.0.
    """
    seconds = (_as_datetime(now) - _as_datetime(last_date)).total_seconds()
    return math.trunc(seconds / SECONDS_PER_YEAR * 10) / 10


def classify_urgency(years_elapsed: float, cycle: MaintenanceCycle) -> Urgency:
    """Determine urgency by comparing elapsed years to the cycle thresholds."""
    if years_elapsed >= cycle.late:
        return Urgency.OVERDUE
    if years_elapsed >= cycle.standard:
        return Urgency.HIGH
    if years_elapsed >= cycle.early:
        return Urgency.MEDIUM
    return Urgency.LOW


def calc_next_recommended_date(last_date: date, standard_years: float) -> date:
    """
    Calculate next recommended date: last + standard calendar years.

    Day-of-month is clamped to the target month, so Feb 29 plus a
    non-leap number of years falls on Feb 28, not Mar 1.
    """
    years = int(standard_years)
    months = int(round((standard_years - years) * 12))
    return last_date + relativedelta(years=years, months=months)


def calc_progress_percentage(years_elapsed: float, standard_years: float) -> float:
    """Share of the standard cycle used up, clamped to [0, 100]."""
    percentage = years_elapsed / standard_years * 100
    return min(max(percentage, 0.0), 100.0)
