# cao_model/resolution/reverse.py
"""
Reverse lookup: observed salary + date -> most likely (scale, step).

Every (scale, step) with a rate in effect on the date is a candidate. The
candidates are scored with ``scoring.confidence_score`` and ranked with
``scoring.rank_candidates``; the best one becomes the match and the next
``max_alternatives`` are reported as alternatives.
"""

import logging
import math
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from cao_model.config.models import DEFAULT_SETTINGS, EngineSettings
from cao_model.exceptions import AmbiguousInputError, OutOfRangeError
from cao_model.schema import EFFECTIVE_DATE, SCALE_NUMBER, STEP_NUMBER, WAGE_BASIS_COLUMNS
from cao_model.utils.date_utils import DateLike
from cao_model.utils.decimal_helpers import round2
from cao_model.wage_scales.table import WageScaleTable

from . import scoring
from .forward import parse_as_of

logger = logging.getLogger("cao_model.resolution")
debug_logger = logging.getLogger("cao_model.debug")


@dataclass(frozen=True)
class AlternativeMatch:
    scale: int
    step: int
    wage: float
    difference: float
    confidence_score: float


@dataclass(frozen=True)
class DetectionResult:
    """Outcome of a reverse lookup.

    ``salary_difference`` is input salary minus the matched CAO wage, so a
    positive value means the person earns more than the scale prescribes.
    ``exact_step`` is only set when the difference is within the exact-match
    epsilon; ``nearest_step`` is always set.
    """
    input_salary: float
    input_date: date
    scale: int
    nearest_step: int
    exact_step: Optional[int]
    cao_wage: float
    rate_effective_date: date
    salary_difference: float
    confidence_score: float
    confidence_tier: str
    compliance_status: str
    compliance_notes: List[str] = field(default_factory=list)
    alternative_matches: List[AlternativeMatch] = field(default_factory=list)
    scale_info: Dict[str, Any] = field(default_factory=dict)
    wage_basis: str = "monthly"
    table_version: Optional[str] = None

    @property
    def is_exact(self) -> bool:
        return self.exact_step is not None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["input_date"] = self.input_date.isoformat()
        data["rate_effective_date"] = self.rate_effective_date.isoformat()
        return data


def _validate_salary(salary: Any) -> float:
    if isinstance(salary, bool):
        raise AmbiguousInputError(f"Salary must be a number, got {salary!r}")
    try:
        value = float(salary)
    except (TypeError, ValueError) as e:
        raise AmbiguousInputError(f"Salary must be a number, got {salary!r}") from e
    if math.isnan(value) or math.isinf(value) or value <= 0:
        raise AmbiguousInputError(f"Salary must be a positive amount, got {salary!r}")
    return value


def resolve_reverse(
    table: WageScaleTable,
    salary: Any,
    as_of: DateLike,
    scale_hint: Optional[str] = None,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> DetectionResult:
    """
    Find the (scale, step) whose wage on ``as_of`` best matches ``salary``.

    Args:
        table: Wage table snapshot
        salary: Observed salary, compared against ``settings.wage_basis``
        as_of: Date the salary applies to
        scale_hint: Scale category to prefer when scores are close
        settings: Scoring and compliance constants

    Raises:
        AmbiguousInputError: If salary is not a positive number.
        OutOfRangeError: If no (scale, step) has a rate in effect on as_of.
    """
    salary = _validate_salary(salary)
    as_of = parse_as_of(as_of)

    wage_col = WAGE_BASIS_COLUMNS[settings.wage_basis]
    effective = table.effective_rates(as_of)
    effective = effective[effective[wage_col].notna()]
    if effective.empty:
        raise OutOfRangeError(
            f"No {settings.wage_basis} wage rates in effect on {as_of.isoformat()} "
            f"(table {table.version})"
        )

    if scale_hint is not None and scale_hint not in table.scale_categories():
        logger.debug("Ignoring unknown scale category hint %r", scale_hint)
        scale_hint = None

    wages = effective[wage_col].to_numpy(dtype=float)
    differences = salary - wages
    exact_mask = np.abs(differences) <= settings.exact_match_epsilon

    candidates: List[scoring.Candidate] = []
    effective_dates: Dict[tuple, date] = {}
    for i, (scale_no, step_no, effective_date) in enumerate(
        zip(effective[SCALE_NUMBER], effective[STEP_NUMBER], effective[EFFECTIVE_DATE])
    ):
        scale_no, step_no = int(scale_no), int(step_no)
        wage = float(wages[i])
        difference = float(differences[i])
        exact = bool(exact_mask[i])
        category = table.get_scale(scale_no).scale_category
        category_match = scale_hint is not None and category == scale_hint
        score = 100.0 if exact else scoring.confidence_score(
            scoring.relative_difference(salary, wage), category_match, settings
        )
        candidates.append(
            scoring.Candidate(
                scale_number=scale_no,
                step_number=step_no,
                scale_category=category,
                wage=wage,
                difference=difference,
                score=score,
                category_match=category_match,
                exact=exact,
            )
        )
        effective_dates[(scale_no, step_no)] = pd.Timestamp(effective_date).date()

    ranked = scoring.rank_candidates(candidates, settings)
    debug_logger.debug(
        "Reverse lookup %.2f on %s ranked: %s",
        salary,
        as_of,
        [(c.scale_number, c.step_number, c.wage, c.score) for c in ranked],
    )
    best = ranked[0]
    alternatives = [
        AlternativeMatch(
            scale=c.scale_number,
            step=c.step_number,
            wage=c.wage,
            difference=round2(c.difference),
            confidence_score=c.score,
        )
        for c in ranked[1 : 1 + settings.max_alternatives]
    ]

    status = scoring.compliance_status(
        best.difference,
        best.wage,
        settings.compliance_tolerance_pct,
        settings.exact_match_epsilon,
    )
    scale_def = table.get_scale(best.scale_number)
    result = DetectionResult(
        input_salary=salary,
        input_date=as_of,
        scale=best.scale_number,
        nearest_step=best.step_number,
        exact_step=best.step_number if best.exact else None,
        cao_wage=best.wage,
        rate_effective_date=effective_dates[(best.scale_number, best.step_number)],
        salary_difference=round2(best.difference),
        confidence_score=best.score,
        confidence_tier=scoring.confidence_tier(best.score, settings),
        compliance_status=status,
        compliance_notes=scoring.compliance_notes(status, best.difference, settings),
        alternative_matches=alternatives,
        scale_info={
            "scale_name": scale_def.scale_name,
            "scale_category": scale_def.scale_category,
            "description": scale_def.description,
            "min_step": scale_def.min_step,
            "max_step": scale_def.max_step,
        },
        wage_basis=settings.wage_basis,
        table_version=table.version,
    )
    logger.info(
        "Reverse lookup %.2f on %s -> scale %s step %s (score %.2f, %s, %d alternatives)",
        salary,
        as_of,
        result.scale,
        result.nearest_step,
        result.confidence_score,
        result.compliance_status,
        len(alternatives),
    )
    return result
