# cao_model/resolution/scoring.py
"""
Pure scoring rules for reverse wage lookup.

Nothing here touches a wage table: the functions map differences and
category matches to scores, tiers and compliance verdicts, so the weighting
constants in ``EngineSettings`` can be tuned and tested on their own.
"""

from dataclasses import dataclass
from typing import List, Sequence

from cao_model.config.models import DEFAULT_SETTINGS, EngineSettings
from cao_model.utils.decimal_helpers import round2

TIER_HIGH = "high"
TIER_MEDIUM = "medium"
TIER_LOW = "low"

COMPLIANT = "compliant"
OVER_CAO = "over_cao"
UNDER_CAO = "under_cao"


@dataclass(frozen=True)
class Candidate:
    """One (scale, step) considered by a reverse lookup."""
    scale_number: int
    step_number: int
    scale_category: str
    wage: float
    difference: float  # observed salary - CAO wage
    score: float
    category_match: bool = False
    exact: bool = False

    @property
    def abs_difference(self) -> float:
        return abs(self.difference)


def confidence_score(
    relative_difference: float,
    category_match: bool = False,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> float:
    """
    Score a candidate between 0 and 100.

    ``relative_difference`` is |salary - wage| / salary. With the default
    decay of 10 a 1 % difference scores 90 and anything 10 % or more off
    scores 0.
    """
    score = 100.0 - abs(relative_difference) * 100.0 * settings.confidence_decay
    if category_match:
        score += settings.category_hint_bonus
    return round2(min(100.0, max(0.0, score)))


def confidence_tier(score: float, settings: EngineSettings = DEFAULT_SETTINGS) -> str:
    if score >= settings.high_confidence_threshold:
        return TIER_HIGH
    if score >= settings.medium_confidence_threshold:
        return TIER_MEDIUM
    return TIER_LOW


def _plain_key(c: Candidate):
    return (-c.score, c.abs_difference, c.scale_number, c.step_number)


def rank_candidates(
    candidates: Sequence[Candidate],
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> List[Candidate]:
    """
    Order candidates best first.

    The primary match is the best scoring candidate, except that a candidate
    matching the category hint wins when its score lies within
    ``category_tie_band`` points of the best. The remaining candidates follow
    by score descending, then smaller absolute difference, lower scale and
    lower step.
    """
    if not candidates:
        return []
    ordered = sorted(candidates, key=_plain_key)
    best_score = ordered[0].score
    band_floor = best_score - settings.category_tie_band
    # an exact match is never displaced by a hinted near miss
    exact_only = ordered[0].exact
    hinted = [
        c
        for c in ordered
        if c.category_match and c.score >= band_floor and (c.exact or not exact_only)
    ]
    primary = hinted[0] if hinted else ordered[0]
    return [primary] + [c for c in ordered if c is not primary]


def compliance_status(
    difference: float,
    cao_wage: float,
    tolerance_pct: float = 0.0,
    epsilon: float = DEFAULT_SETTINGS.exact_match_epsilon,
) -> str:
    """Classify ``difference`` (salary - CAO wage) against the tolerance band."""
    band = max(epsilon, abs(cao_wage) * tolerance_pct / 100.0)
    if abs(difference) <= band:
        return COMPLIANT
    return OVER_CAO if difference > 0 else UNDER_CAO


def compliance_notes(
    status: str,
    difference: float,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> List[str]:
    """Human-readable reasons behind a compliance verdict."""
    notes: List[str] = []
    amount = round2(abs(difference))
    if status == COMPLIANT:
        if abs(difference) <= settings.exact_match_epsilon:
            notes.append("Salary exactly matches CAO rate")
        else:
            notes.append(f"Salary within tolerance of CAO rate (difference {round2(difference)})")
    elif status == OVER_CAO:
        notes.append(f"Salary is {amount} above CAO rate")
        if abs(difference) > settings.significant_premium_amount:
            notes.append("Significant premium above CAO rate")
    else:
        notes.append(f"Salary is {amount} below CAO rate")
        notes.append("May require salary adjustment to meet CAO requirements")
    return notes


def relative_difference(salary: float, wage: float) -> float:
    return abs(salary - wage) / salary
