from datetime import date, timedelta

import pytest

from cao_model.config.models import EngineSettings
from cao_model.normalization.milestones import (
    EXPIRY_CRITICAL,
    EXPIRY_NONE,
    EXPIRY_UPCOMING,
    EXPIRY_URGENT,
    days_until_expiry,
    expiry_details,
    expiry_warning,
    is_conversion,
)


@pytest.mark.parametrize(
    "days, expected",
    [
        (0, EXPIRY_CRITICAL),
        (4, EXPIRY_CRITICAL),
        (7, EXPIRY_CRITICAL),
        (8, EXPIRY_URGENT),
        (19, EXPIRY_URGENT),
        (30, EXPIRY_URGENT),
        (31, EXPIRY_UPCOMING),
        (75, EXPIRY_UPCOMING),
        (90, EXPIRY_UPCOMING),
        (91, EXPIRY_NONE),
        (243, EXPIRY_NONE),
    ],
)
def test_expiry_warning_levels(days, expected):
    assert expiry_warning(days) == expected


def test_expiry_warning_custom_thresholds():
    settings = EngineSettings(expiry_upcoming_days=60, expiry_urgent_days=14, expiry_critical_days=3)
    assert expiry_warning(75, settings) == EXPIRY_NONE
    assert expiry_warning(19, settings) == EXPIRY_UPCOMING
    assert expiry_warning(4, settings) == EXPIRY_URGENT


def test_days_until_expiry(now):
    assert days_until_expiry(now + timedelta(days=19), now) == 19
    assert days_until_expiry(None, now) is None


def test_expiry_details(now):
    assert expiry_details(date(2024, 10, 20), now) == {
        "days_until_expiry": 19,
        "expiry_warning": EXPIRY_URGENT,
    }
    assert expiry_details(date(2025, 6, 1), now) == {
        "days_until_expiry": 243,
        "expiry_warning": EXPIRY_NONE,
    }
    assert expiry_details(date(2024, 9, 30), now) == {}
    assert expiry_details(None, now) == {}


def test_is_conversion():
    assert is_conversion("fixed_term", "permanent")
    assert not is_conversion("permanent", "fixed_term")
    assert not is_conversion("fixed_term", "fixed_term")
    assert not is_conversion(None, "permanent")
