"""Contract milestones: expiry warnings and fixed-term to permanent conversions."""

from datetime import date
from typing import Any, Dict, Optional

from cao_model.config.models import DEFAULT_SETTINGS, EngineSettings
from cao_model.schema import CONTRACT_FIXED_TERM, CONTRACT_PERMANENT

EXPIRY_NONE = "none"
EXPIRY_UPCOMING = "upcoming"
EXPIRY_URGENT = "urgent"
EXPIRY_CRITICAL = "critical"


def days_until_expiry(end_date: Optional[date], now: date) -> Optional[int]:
    if end_date is None:
        return None
    return (end_date - now).days


def expiry_warning(days: int, settings: EngineSettings = DEFAULT_SETTINGS) -> str:
    """Warning level for a contract ending in ``days`` days."""
    if days > settings.expiry_upcoming_days:
        return EXPIRY_NONE
    if days <= settings.expiry_critical_days:
        return EXPIRY_CRITICAL
    if days <= settings.expiry_urgent_days:
        return EXPIRY_URGENT
    return EXPIRY_UPCOMING


def expiry_details(
    end_date: Optional[date], now: date, settings: EngineSettings = DEFAULT_SETTINGS
) -> Dict[str, Any]:
    """``days_until_expiry`` and ``expiry_warning`` for a future end date, else {}."""
    days = days_until_expiry(end_date, now)
    if days is None or days < 0:
        return {}
    return {"days_until_expiry": days, "expiry_warning": expiry_warning(days, settings)}


def is_conversion(previous_type: Optional[str], next_type: Optional[str]) -> bool:
    return previous_type == CONTRACT_FIXED_TERM and next_type == CONTRACT_PERMANENT
