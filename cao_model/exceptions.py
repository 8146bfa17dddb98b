"""
Exception classes and data-quality signals for the CAO model.

Lookups and validation failures are raised as typed exceptions so callers can
tell "no match" apart from a real value. Data-quality problems that do not
invalidate a computation are collected as ``DataQualityWarning`` records and
attached to the result instead.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

DATA_QUALITY_LOGGER = "cao_model.data_quality"

_dq_logger = logging.getLogger(DATA_QUALITY_LOGGER)


class CaoModelError(Exception):
    """Base exception for all cao_model errors."""

    pass


class InputError(CaoModelError, ValueError):
    """Raised for malformed or out-of-domain arguments."""

    pass


class NotFoundError(InputError, LookupError):
    """Raised when a scale or (scale, step) pair is not in the wage table."""

    pass


class AmbiguousInputError(InputError):
    """Raised when a reverse lookup is asked for a non-positive salary."""

    pass


class OutOfRangeError(CaoModelError):
    """Raised when a date predates the earliest known wage rate."""

    pass


class ConfigError(CaoModelError):
    """Raised for invalid wage-table reference data or settings files."""

    pass


@dataclass(frozen=True)
class DataQualityWarning:
    """Non-fatal problem found while normalizing or assembling events.

    Args:
        code: Short machine-readable identifier (e.g. ``missing_field``)
        message: Human-readable description
        entity_id: Person the warning relates to, if known
        context: Extra key/value details for auditing
    """

    code: str
    message: str
    entity_id: Optional[str] = None
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "entity_id": self.entity_id,
            "context": dict(self.context),
        }


def data_quality_warning(
    code: str, message: str, entity_id: Optional[str] = None, **context: Any
) -> DataQualityWarning:
    """Create a DataQualityWarning and log it on the data-quality logger."""
    warning = DataQualityWarning(code=code, message=message, entity_id=entity_id, context=context)
    _dq_logger.warning("[%s] %s (entity=%s) %s", code, message, entity_id, context or "")
    return warning
