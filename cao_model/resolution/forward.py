# cao_model/resolution/forward.py
"""
Forward lookup: (scale, step, date) -> wage in effect on that date.
"""

import logging
from datetime import date
from typing import List

import pandas as pd

from cao_model.exceptions import InputError, NotFoundError, OutOfRangeError
from cao_model.schema import EFFECTIVE_DATE, SCALE_NUMBER, STEP_NUMBER
from cao_model.utils.date_utils import DateLike, to_date
from cao_model.wage_scales.models import WageAmounts
from cao_model.wage_scales.table import WageScaleTable, row_to_rate

logger = logging.getLogger("cao_model.resolution")


def parse_as_of(value: DateLike) -> date:
    try:
        as_of = to_date(value)
    except (TypeError, ValueError) as e:
        raise InputError(f"Invalid date: {value!r}") from e
    if as_of is None:
        raise InputError("A lookup date is required")
    return as_of


def resolve_forward(
    table: WageScaleTable, scale: int, step: int, as_of: DateLike
) -> WageAmounts:
    """
    Return the wage of (scale, step) in effect on ``as_of``.

    The row with the greatest effective_date <= as_of is used; later rows
    are negotiated raises that have not started yet.

    Raises:
        NotFoundError: If the table has no rates for (scale, step).
        OutOfRangeError: If ``as_of`` precedes the earliest rate of the pair.
    """
    as_of = parse_as_of(as_of)
    history = table.history(scale, step)
    if history.empty:
        if scale not in table.scales:
            raise NotFoundError(f"Wage scale {scale} not found")
        raise NotFoundError(f"No wage rates for scale {scale} step {step}")

    eligible = history[history[EFFECTIVE_DATE] <= pd.Timestamp(as_of)]
    if eligible.empty:
        earliest = history[EFFECTIVE_DATE].min().date()
        raise OutOfRangeError(
            f"{as_of.isoformat()} precedes the earliest rate for scale {scale} "
            f"step {step} ({earliest.isoformat()})"
        )

    rate = row_to_rate(eligible.iloc[-1])
    logger.debug(
        "Forward lookup scale=%s step=%s as_of=%s -> %s (effective %s, table %s)",
        scale,
        step,
        as_of,
        rate.monthly_wage,
        rate.effective_date,
        table.version,
    )
    return WageAmounts(
        scale_number=rate.scale_number,
        step_number=rate.step_number,
        effective_date=rate.effective_date,
        hourly_wage=rate.hourly_wage,
        monthly_wage=rate.monthly_wage,
        yearly_wage=rate.yearly_wage,
    )


def get_available_steps(table: WageScaleTable, scale: int, as_of: DateLike) -> List[int]:
    """Sorted steps of ``scale`` that have a rate in effect on ``as_of``.

    Raises:
        NotFoundError: If the scale is unknown.
    """
    table.get_scale(scale)
    effective = table.effective_rates(parse_as_of(as_of))
    steps = effective.loc[effective[SCALE_NUMBER] == scale, STEP_NUMBER]
    return sorted(int(s) for s in steps.unique())
