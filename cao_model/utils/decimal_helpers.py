# utils/decimal_helpers.py

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

# Standard quantization unit for money and percentages
TWO_PLACES = Decimal('0.01')


def to_money(d: Decimal) -> Decimal:
    """Quantize Decimal to two places with ROUND_HALF_UP rounding."""
    return d.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def round2(value: Optional[float]) -> Optional[float]:
    """Round a float half-up to two decimals, passing None through.

    Goes through ``str`` so binary noise such as 10.000000000000002 rounds
    the way a person reading the number expects.
    """
    if value is None:
        return None
    return float(to_money(Decimal(str(value))))


def percent_change(previous: Optional[float], current: Optional[float]) -> Optional[float]:
    """Relative change from previous to current in percent, rounded to 2 places.

    Returns None when either side is unknown or previous is zero.
    """
    if previous is None or current is None or previous == 0:
        return None
    return round2((current - previous) / previous * 100)
