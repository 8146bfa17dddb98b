# cao_model/pay.py
"""
Pay arithmetic around CAO wages: part-time pro-rating, hourly/monthly
conversion and the commuting allowance.

All amounts are rounded half-up to cents.
"""

import math
from typing import Optional

from cao_model.config.models import DEFAULT_SETTINGS, EngineSettings
from cao_model.exceptions import InputError
from cao_model.utils.decimal_helpers import round2

WEEKS_PER_MONTH = 4.33

# Commuting allowance
TRAVEL_RATE_PER_KM = 0.23
WORKING_WEEKS_PER_YEAR = 46.5
HOURS_PER_WORKDAY = 8
MAX_WORKDAYS_PER_WEEK = 5


def _positive(name: str, value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise InputError(f"{name} must be a number, got {value!r}") from e
    if not value > 0:
        raise InputError(f"{name} must be positive, got {value}")
    return value


def calculate_gross_monthly(
    monthly_full_time: float,
    hours_per_week: float,
    full_time_hours: Optional[float] = None,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> float:
    """Pro-rate a full-time monthly CAO wage to ``hours_per_week``.

    The full-time week is ``full_time_hours`` when given, else
    ``settings.full_time_hours``.
    """
    monthly_full_time = _positive("monthly_full_time", monthly_full_time)
    hours_per_week = _positive("hours_per_week", hours_per_week)
    if full_time_hours is None:
        full_time_hours = settings.full_time_hours
    full_time_hours = _positive("full_time_hours", full_time_hours)
    return round2(monthly_full_time * hours_per_week / full_time_hours)


def hourly_from_monthly(monthly: float, hours_per_week: float) -> float:
    """Hourly wage from a monthly wage, using 4.33 weeks per month."""
    monthly = _positive("monthly", monthly)
    hours_per_week = _positive("hours_per_week", hours_per_week)
    return round2(monthly / (hours_per_week * WEEKS_PER_MONTH))


def calculate_travel_allowance(km_one_way: float, hours_per_week: float) -> float:
    """
    Monthly commuting allowance.

    Both ways at 0.23 per km, for ceil(hours / 8) days a week (at most 5),
    46.5 working weeks a year, spread over 12 months.
    """
    km_one_way = _positive("km_one_way", km_one_way)
    hours_per_week = _positive("hours_per_week", hours_per_week)
    days = min(MAX_WORKDAYS_PER_WEEK, math.ceil(hours_per_week / HOURS_PER_WORKDAY))
    yearly = km_one_way * TRAVEL_RATE_PER_KM * 2 * days * WORKING_WEEKS_PER_YEAR
    return round2(yearly / 12)
