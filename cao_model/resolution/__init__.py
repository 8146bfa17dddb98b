"""
Wage resolution over a WageScaleTable snapshot: forward lookup, reverse
lookup (salary detection), progression and available steps.
"""

from .forward import get_available_steps, resolve_forward
from .progression import ProgressionStep, get_progression
from .resolver import WageResolver
from .reverse import AlternativeMatch, DetectionResult, resolve_reverse
from .scoring import (
    COMPLIANT,
    OVER_CAO,
    UNDER_CAO,
    compliance_notes,
    compliance_status,
    confidence_score,
    confidence_tier,
    rank_candidates,
)

__all__ = [
    "AlternativeMatch",
    "COMPLIANT",
    "DetectionResult",
    "OVER_CAO",
    "ProgressionStep",
    "UNDER_CAO",
    "WageResolver",
    "compliance_notes",
    "compliance_status",
    "confidence_score",
    "confidence_tier",
    "get_available_steps",
    "get_progression",
    "rank_candidates",
    "resolve_forward",
    "resolve_reverse",
]
