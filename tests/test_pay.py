import pytest

from cao_model.config.models import EngineSettings
from cao_model.exceptions import InputError
from cao_model.pay import calculate_gross_monthly, calculate_travel_allowance, hourly_from_monthly


def test_gross_monthly_is_pro_rated():
    assert calculate_gross_monthly(3600, 24) == 2400.0
    assert calculate_gross_monthly(3600, 36) == 3600.0
    assert calculate_gross_monthly(3800, 32, full_time_hours=38) == 3200.0


def test_hourly_from_monthly():
    assert hourly_from_monthly(2598, 36) == 16.67


@pytest.mark.parametrize("km, hours, expected", [(10, 36, 89.13), (10, 16, 35.65), (25, 8, 44.56)])
def test_travel_allowance(km, hours, expected):
    assert calculate_travel_allowance(km, hours) == expected


@pytest.mark.parametrize("args", [(0, 24), (3600, 0), (-1, 24), ("abc", 24)])
def test_gross_monthly_rejects_non_positive(args):
    with pytest.raises(InputError):
        calculate_gross_monthly(*args)


def test_travel_allowance_rejects_zero_distance():
    with pytest.raises(InputError):
        calculate_travel_allowance(0, 24)


def test_gross_monthly_follows_settings():
    settings = EngineSettings(full_time_hours=38)
    assert calculate_gross_monthly(3800, 32, settings=settings) == 3200.0
    # an explicit full-time week wins over the setting
    assert calculate_gross_monthly(3600, 24, full_time_hours=36, settings=settings) == 2400.0
