from datetime import date, datetime

import pandas as pd
import pytest

from cao_model.exceptions import InputError, NotFoundError, OutOfRangeError
from cao_model.resolution.forward import get_available_steps, parse_as_of, resolve_forward


def test_forward_returns_rate_in_effect(history_table):
    wage = resolve_forward(history_table, 6, 10, date(2024, 6, 30))
    assert wage.monthly_wage == 2400.0
    assert wage.hourly_wage == 15.38
    assert wage.yearly_wage is None
    assert wage.effective_date == date(2024, 1, 1)


def test_forward_switches_on_effective_date(history_table):
    wage = resolve_forward(history_table, 6, 10, date(2024, 7, 1))
    assert wage.monthly_wage == 2448.0
    assert wage.hourly_wage is None
    assert wage.effective_date == date(2024, 7, 1)


def test_forward_uses_latest_rate_after_last_change(history_table):
    wage = resolve_forward(history_table, 6, 11, date(2030, 1, 1))
    assert wage.monthly_wage == 2601.0
    assert wage.amount("monthly") == 2601.0


@pytest.mark.parametrize("as_of", ["2024-08-15", datetime(2024, 8, 15, 13, 30), pd.Timestamp("2024-08-15")])
def test_forward_accepts_date_like_values(history_table, as_of):
    assert resolve_forward(history_table, 6, 10, as_of).monthly_wage == 2448.0


def test_forward_before_first_rate(history_table):
    with pytest.raises(OutOfRangeError, match="2024-01-01"):
        resolve_forward(history_table, 6, 10, date(2023, 12, 31))


def test_forward_unknown_scale(history_table):
    with pytest.raises(NotFoundError, match="Wage scale 9 not found"):
        resolve_forward(history_table, 9, 10, date(2024, 8, 1))


def test_forward_step_without_rates(history_table):
    with pytest.raises(NotFoundError, match="scale 6 step 23"):
        resolve_forward(history_table, 6, 23, date(2024, 8, 1))


def test_not_found_is_an_input_error(history_table):
    with pytest.raises(InputError):
        resolve_forward(history_table, 9, 1, date(2024, 8, 1))
    with pytest.raises(LookupError):
        resolve_forward(history_table, 9, 1, date(2024, 8, 1))


@pytest.mark.parametrize("bad", ["garbage", None, ""])
def test_forward_invalid_date(history_table, bad):
    with pytest.raises(InputError):
        resolve_forward(history_table, 6, 10, bad)


def test_parse_as_of():
    assert parse_as_of("2024-03-01") == date(2024, 3, 1)
    assert parse_as_of(datetime(2024, 3, 1, 8, 0)) == date(2024, 3, 1)
    with pytest.raises(InputError, match="required"):
        parse_as_of(None)


def test_available_steps(history_table):
    assert get_available_steps(history_table, 6, date(2024, 10, 1)) == [10, 11]
    assert get_available_steps(history_table, 7, "2024-10-01") == [1, 2]
    assert get_available_steps(history_table, 6, date(2023, 1, 1)) == []


def test_available_steps_unknown_scale(history_table):
    with pytest.raises(NotFoundError):
        get_available_steps(history_table, 9, date(2024, 10, 1))
