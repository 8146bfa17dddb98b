from dataclasses import dataclass
from datetime import date
from typing import Optional

from cao_model.exceptions import ConfigError


@dataclass(frozen=True)
class WageScaleDefinition:
    """A CAO wage scale (schaal) and its valid step (trede) range.

    Args:
        scale_number: Unique scale identifier
        scale_name: Human-readable name, e.g. "Schaal 6"
        scale_category: Job family / qualification level the scale belongs to
        min_step: Lowest valid step
        max_step: Highest valid step
        description: Free-text description of the roles in this scale
        is_active: Inactive scales stay resolvable but are hidden from selection lists
    """
    scale_number: int
    scale_name: str
    scale_category: str
    min_step: int
    max_step: int
    description: str = ""
    is_active: bool = True

    def __post_init__(self):
        if self.min_step > self.max_step:
            raise ConfigError(
                f"Scale {self.scale_number} ({self.scale_name}): min_step {self.min_step} "
                f"> max_step {self.max_step}"
            )

    def has_step(self, step: int) -> bool:
        """Check if a step lies within this scale's range."""
        return self.min_step <= step <= self.max_step


@dataclass(frozen=True)
class WageRate:
    """Wage of one (scale, step) from ``effective_date`` until superseded."""
    scale_number: int
    step_number: int
    effective_date: date
    monthly_wage: Optional[float]
    hourly_wage: Optional[float] = None
    yearly_wage: Optional[float] = None

    @property
    def key(self):
        return (self.scale_number, self.step_number, self.effective_date)


@dataclass(frozen=True)
class WageAmounts:
    """Result of a forward lookup: the rate in effect on the requested date."""
    scale_number: int
    step_number: int
    effective_date: date
    hourly_wage: Optional[float]
    monthly_wage: Optional[float]
    yearly_wage: Optional[float]

    def amount(self, basis: str) -> Optional[float]:
        """Return the wage for ``basis`` ('hourly', 'monthly' or 'yearly')."""
        return {
            "hourly": self.hourly_wage,
            "monthly": self.monthly_wage,
            "yearly": self.yearly_wage,
        }[basis]
