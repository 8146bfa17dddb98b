from datetime import date
from typing import Dict, List

from cao_model.utils.decimal_helpers import round2

from .models import WageRate, WageScaleDefinition

# Default scale definitions (Kinderopvang CAO)
DEFAULT_SCALES: Dict[int, WageScaleDefinition] = {
    6: WageScaleDefinition(
        scale_number=6,
        scale_name="Schaal 6",
        scale_category="Vakspecialist niveau 4",
        min_step=10,
        max_step=23,
        description="Senior pedagogisch medewerker",
    ),
}

# Illustrative full-time (36h) monthly wages per step as of 2025-01-01
_BASE_DATE = date(2025, 1, 1)
_BASE_MONTHLY: Dict[int, float] = {
    10: 2790.00,
    11: 2877.00,
    12: 2968.00,
    13: 3058.00,
    14: 3150.00,
    15: 3245.00,
    16: 3342.00,
    17: 3442.00,
    18: 3545.00,
    19: 3651.00,
    20: 3761.00,
    21: 3874.00,
    22: 3990.00,
    23: 4110.00,
}

# Negotiated structural raises, applied cumulatively on the listed dates
DEFAULT_INDEXATIONS: Dict[date, float] = {
    date(2025, 7, 1): 0.010,
    date(2026, 1, 1): 0.020,
}

FULL_TIME_HOURS = 36.0
WEEKS_PER_YEAR = 52


def _rate(scale: int, step: int, effective: date, monthly: float) -> WageRate:
    return WageRate(
        scale_number=scale,
        step_number=step,
        effective_date=effective,
        monthly_wage=monthly,
        hourly_wage=round2(monthly * 12 / WEEKS_PER_YEAR / FULL_TIME_HOURS),
        yearly_wage=round2(monthly * 12),
    )


def build_default_rates() -> List[WageRate]:
    """Expand the base wages and indexations into dated WageRate rows."""
    rates: List[WageRate] = []
    for step, monthly in _BASE_MONTHLY.items():
        rates.append(_rate(6, step, _BASE_DATE, monthly))
        current = monthly
        for effective, pct in sorted(DEFAULT_INDEXATIONS.items()):
            current = round2(current * (1 + pct))
            rates.append(_rate(6, step, effective, current))
    return rates


DEFAULT_RATES: List[WageRate] = build_default_rates()
