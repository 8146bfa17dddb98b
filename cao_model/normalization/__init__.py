"""
Normalization of raw employment records into typed ChangeEvents.
"""

from .events import ChangeEvent, EventType, enforce_single_current
from .extract import Extracted, extract_hours, extract_salary
from .milestones import days_until_expiry, expiry_details, expiry_warning
from .normalizer import (
    NormalizationResult,
    coerce_record,
    normalize_history_rows,
    normalize_record,
    normalize_records,
)
from .records import EmploymentRecord, HoursEntry, SalaryEntry

__all__ = [
    "ChangeEvent",
    "EmploymentRecord",
    "EventType",
    "Extracted",
    "HoursEntry",
    "NormalizationResult",
    "SalaryEntry",
    "coerce_record",
    "days_until_expiry",
    "enforce_single_current",
    "expiry_details",
    "expiry_warning",
    "extract_hours",
    "extract_salary",
    "normalize_history_rows",
    "normalize_record",
    "normalize_records",
]
