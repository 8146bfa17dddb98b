from decimal import Decimal

import pytest

from cao_model.utils.decimal_helpers import percent_change, round2, to_money


def test_to_money_rounds_half_up():
    assert to_money(Decimal("2.675")) == Decimal("2.68")
    assert to_money(Decimal("-2.675")) == Decimal("-2.68")


@pytest.mark.parametrize(
    "value, expected",
    [(2.675, 2.68), (10.000000000000002, 10.0), (0.125, 0.13), (-0.125, -0.13), (None, None)],
)
def test_round2(value, expected):
    assert round2(value) == expected


def test_percent_change():
    assert percent_change(20.0, 22.0) == 10.0
    assert percent_change(24, 32) == 33.33
    assert percent_change(2600, 2574) == -1.0
    assert percent_change(0, 5) is None
    assert percent_change(None, 5) is None
    assert percent_change(5, None) is None
