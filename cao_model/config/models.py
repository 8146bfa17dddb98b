# cao_model/config/models.py
"""
Pydantic models for the tunable constants of the wage resolver and the
timeline engine, loaded from YAML (e.g. engine.yaml) or used with defaults.
"""

import logging
from enum import Enum
from typing import Literal, Set

from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)


class ToleranceLevel(float, Enum):
    """Named compliance tolerance bands, in percent of the CAO wage."""

    EXACT = 0.0
    STRICT = 2.5
    NORMAL = 5.0
    LOOSE = 10.0


class EngineSettings(BaseModel):
    """Constants used by reverse lookup scoring, compliance and timelines."""

    # --- Reverse lookup ---
    exact_match_epsilon: float = Field(
        0.005, ge=0.0, description="Max absolute difference counted as an exact match"
    )
    max_alternatives: int = Field(
        3, ge=0, description="Number of alternative matches returned"
    )
    confidence_decay: float = Field(
        10.0,
        gt=0.0,
        description="Score points lost per percent of relative difference",
    )
    category_tie_band: float = Field(
        1.0,
        ge=0.0,
        description="Score distance within which a scale-category hint breaks ties",
    )
    category_hint_bonus: float = Field(
        0.0,
        ge=0.0,
        le=100.0,
        description="Score bonus for candidates in the hinted scale category",
    )
    high_confidence_threshold: float = Field(85.0, ge=0.0, le=100.0)
    medium_confidence_threshold: float = Field(60.0, ge=0.0, le=100.0)
    wage_basis: Literal["hourly", "monthly", "yearly"] = Field(
        "monthly", description="Which wage column observed salaries are compared against"
    )

    # --- Compliance ---
    compliance_tolerance_pct: float = Field(
        ToleranceLevel.EXACT.value,
        ge=0.0,
        le=100.0,
        description="Band around the CAO wage (percent) still reported as compliant",
    )
    significant_premium_amount: float = Field(
        500.0, ge=0.0, description="Premium above the CAO wage that warrants a note"
    )

    # --- Pay helpers ---
    full_time_hours: float = Field(36.0, gt=0.0, description="Hours per week of a full-time CAO contract")

    # --- Timeline ---
    authoritative_sources: Set[str] = Field(
        default_factory=lambda: {"employes_sync"},
        description="Event sources that win deduplication conflicts",
    )
    expiry_upcoming_days: int = Field(90, ge=0)
    expiry_urgent_days: int = Field(30, ge=0)
    expiry_critical_days: int = Field(7, ge=0)

    # --- Reference data ---
    refresh_interval_seconds: float = Field(
        3600.0, gt=0.0, description="Age after which a wage-table snapshot is reloaded"
    )

    @model_validator(mode="after")
    def check_thresholds(self) -> "EngineSettings":
        if self.high_confidence_threshold < self.medium_confidence_threshold:
            raise ValueError(
                "high_confidence_threshold must be >= medium_confidence_threshold, "
                f"got {self.high_confidence_threshold} < {self.medium_confidence_threshold}"
            )
        if not (
            self.expiry_critical_days <= self.expiry_urgent_days <= self.expiry_upcoming_days
        ):
            raise ValueError(
                "Expiry warning days must satisfy critical <= urgent <= upcoming"
            )
        return self


DEFAULT_SETTINGS = EngineSettings()
