# cao_model/projection.py
"""
Current versus next scheduled wage for a (scale, step).
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from cao_model.resolution.forward import parse_as_of
from cao_model.resolution.progression import ProgressionStep, get_progression
from cao_model.utils.date_utils import DateLike
from cao_model.utils.decimal_helpers import percent_change, round2
from cao_model.wage_scales.table import WageScaleTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressionForecast:
    scale: int
    step: int
    progression: List[ProgressionStep] = field(default_factory=list)
    current: Optional[ProgressionStep] = None
    next_scheduled: Optional[ProgressionStep] = None
    increase_amount: Optional[float] = None
    increase_percentage: Optional[float] = None

    @property
    def has_scheduled_raise(self) -> bool:
        return self.next_scheduled is not None

    def to_dict(self) -> Dict[str, Any]:
        def _step(p: Optional[ProgressionStep]) -> Optional[Dict[str, Any]]:
            if p is None:
                return None
            return {
                "effective_date": p.effective_date.isoformat(),
                "wage": p.wage,
                "increase_from_previous": p.increase_from_previous,
                "increase_percentage": p.increase_percentage,
            }

        return {
            "scale": self.scale,
            "step": self.step,
            "progression": [_step(p) for p in self.progression],
            "current": _step(self.current),
            "next_scheduled": _step(self.next_scheduled),
            "increase_amount": self.increase_amount,
            "increase_percentage": self.increase_percentage,
        }


def project_progression(
    table: WageScaleTable,
    scale: int,
    step: int,
    as_of: DateLike,
    wage_basis: str = "monthly",
) -> ProgressionForecast:
    """
    Split the progression of (scale, step) around ``as_of``.

    ``current`` is the row in effect on ``as_of`` (None before the first
    rate); ``next_scheduled`` is the earliest row dated after ``as_of``.
    """
    as_of = parse_as_of(as_of)
    progression = get_progression(table, scale, step, wage_basis)

    past = [p for p in progression if p.effective_date <= as_of]
    future = [p for p in progression if p.effective_date > as_of]
    current = past[-1] if past else None
    next_scheduled = future[0] if future else None

    increase_amount = None
    increase_pct = None
    if current is not None and next_scheduled is not None:
        if current.wage is not None and next_scheduled.wage is not None:
            increase_amount = round2(next_scheduled.wage - current.wage)
            increase_pct = percent_change(current.wage, next_scheduled.wage)

    if next_scheduled is not None:
        logger.debug(
            "Scale %s step %s: next scheduled wage %s on %s",
            scale,
            step,
            next_scheduled.wage,
            next_scheduled.effective_date,
        )
    return ProgressionForecast(
        scale=scale,
        step=step,
        progression=progression,
        current=current,
        next_scheduled=next_scheduled,
        increase_amount=increase_amount,
        increase_percentage=increase_pct,
    )
