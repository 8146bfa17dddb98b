import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

import pandas as pd

from cao_model.schema import EFFECTIVE_DATE, WAGE_BASIS_COLUMNS
from cao_model.utils.decimal_helpers import percent_change, round2
from cao_model.wage_scales.table import WageScaleTable

logger = logging.getLogger("cao_model.resolution")


@dataclass(frozen=True)
class ProgressionStep:
    """One dated wage of a (scale, step) and the change from the row before it."""
    effective_date: date
    wage: Optional[float]
    increase_from_previous: Optional[float]
    increase_percentage: Optional[float]


def get_progression(
    table: WageScaleTable, scale: int, step: int, wage_basis: str = "monthly"
) -> List[ProgressionStep]:
    """
    Wage history of (scale, step), oldest first.

    Rows dated after today are included: they are raises that were already
    negotiated. ``increase_from_previous`` is None for the first row and may
    be negative. An unknown pair gives an empty list.
    """
    history = table.history(scale, step)
    if history.empty:
        logger.debug("No progression for scale %s step %s", scale, step)
        return []

    wages = history[WAGE_BASIS_COLUMNS[wage_basis]]
    result: List[ProgressionStep] = []
    previous: Optional[float] = None
    for i, (effective, wage) in enumerate(zip(history[EFFECTIVE_DATE], wages)):
        current = None if pd.isna(wage) else float(wage)
        if i == 0 or previous is None or current is None:
            increase = None
        else:
            increase = round2(current - previous)
        result.append(
            ProgressionStep(
                effective_date=pd.Timestamp(effective).date(),
                wage=current,
                increase_from_previous=increase,
                increase_percentage=percent_change(previous, current) if i > 0 else None,
            )
        )
        previous = current
    return result
