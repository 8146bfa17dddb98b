from datetime import date, datetime

import pandas as pd
import pytest

from cao_model.utils.date_utils import humanize_span, months_between, to_date


@pytest.mark.parametrize(
    "value, expected",
    [
        (date(2024, 1, 31), date(2024, 1, 31)),
        (datetime(2024, 1, 31, 23, 59), date(2024, 1, 31)),
        (pd.Timestamp("2024-01-31 08:00"), date(2024, 1, 31)),
        ("2024-01-31", date(2024, 1, 31)),
        ("2024-01-31T00:00:00", date(2024, 1, 31)),
        (" 2024-01-31 ", date(2024, 1, 31)),
        ("0001-01-01T00:00:00", None),
        (date(1, 1, 1), None),
        ("", None),
        (None, None),
        (pd.NaT, None),
    ],
)
def test_to_date(value, expected):
    assert to_date(value) == expected


def test_to_date_rejects_garbage():
    with pytest.raises(ValueError):
        to_date("not a date")


def test_months_between():
    assert months_between(date(2022, 7, 1), date(2024, 10, 1)) == 27
    assert months_between(date(2024, 1, 31), date(2024, 2, 29)) == 0
    assert months_between(date(2024, 10, 1), date(2024, 7, 1)) == -3


def test_humanize_span():
    assert humanize_span(date(2022, 7, 1), date(2024, 10, 1)) == "2 years, 3 months"
    assert humanize_span(date(2020, 1, 1), date(2021, 1, 1)) == "1 year"
    assert humanize_span(date(2024, 1, 1), date(2024, 2, 1)) == "1 month"
    assert humanize_span(date(2024, 1, 1), date(2024, 1, 2)) == "1 day"
    assert humanize_span(date(2024, 1, 1), date(2024, 1, 1)) == "0 days"
