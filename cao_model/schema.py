# cao_model/schema.py
"""Centralized schema constants for wage tables and timeline events.

This module defines:
  - Wage-rate column names, their pandas dtypes and the pyarrow schema used
    when rates are read from Parquet
  - Change-event type constants and their rendering precedence
  - Timeline DataFrame column ordering

All other modules should import from here for consistency.
"""
from __future__ import annotations

from typing import Dict, List

import pandas as pd
import pyarrow as pa

# -----------------------------------------------------------------------------
# Wage-rate columns
# -----------------------------------------------------------------------------
SCALE_NUMBER = "scale_number"
STEP_NUMBER = "step_number"
EFFECTIVE_DATE = "effective_date"
HOURLY_WAGE = "hourly_wage"
MONTHLY_WAGE = "monthly_wage"
YEARLY_WAGE = "yearly_wage"

WAGE_RATE_KEY: List[str] = [SCALE_NUMBER, STEP_NUMBER, EFFECTIVE_DATE]

WAGE_RATE_COLS: List[str] = [
    SCALE_NUMBER,
    STEP_NUMBER,
    EFFECTIVE_DATE,
    HOURLY_WAGE,
    MONTHLY_WAGE,
    YEARLY_WAGE,
]

WAGE_RATE_DTYPES: Dict[str, object] = {
    SCALE_NUMBER: "int64",
    STEP_NUMBER: "int64",
    EFFECTIVE_DATE: "datetime64[ns]",
    HOURLY_WAGE: pd.Float64Dtype(),
    MONTHLY_WAGE: pd.Float64Dtype(),
    YEARLY_WAGE: pd.Float64Dtype(),
}

# Explicit Arrow schema so Parquet reference data keeps nullable wage columns
WAGE_RATE_SCHEMA = pa.schema(
    [
        pa.field(SCALE_NUMBER, pa.int64(), nullable=False),
        pa.field(STEP_NUMBER, pa.int64(), nullable=False),
        pa.field(EFFECTIVE_DATE, pa.date32(), nullable=False),
        pa.field(HOURLY_WAGE, pa.float64(), nullable=True),
        pa.field(MONTHLY_WAGE, pa.float64(), nullable=True),
        pa.field(YEARLY_WAGE, pa.float64(), nullable=True),
    ]
)

WAGE_BASIS_COLUMNS: Dict[str, str] = {
    "hourly": HOURLY_WAGE,
    "monthly": MONTHLY_WAGE,
    "yearly": YEARLY_WAGE,
}

# -----------------------------------------------------------------------------
# Change-event types
# -----------------------------------------------------------------------------
EVT_CONTRACT_START = "contract_start"
EVT_CONTRACT_END = "contract_end"
EVT_CONTRACT_CONVERSION = "contract_conversion"
EVT_SALARY_CHANGE = "salary_change"
EVT_HOURS_CHANGE = "hours_change"

# Lower sorts first within a single date
EVENT_TYPE_PRECEDENCE: Dict[str, int] = {
    EVT_CONTRACT_START: 0,
    EVT_CONTRACT_END: 1,
    EVT_CONTRACT_CONVERSION: 2,
    EVT_SALARY_CHANGE: 3,
    EVT_HOURS_CHANGE: 4,
}
OTHER_EVENT_PRECEDENCE = 99

CONTRACT_PERMANENT = "permanent"
CONTRACT_FIXED_TERM = "fixed_term"

# -----------------------------------------------------------------------------
# Timeline frame columns
# -----------------------------------------------------------------------------
ENTITY_ID = "entity_id"
EVENT_DATE = "event_date"
EVENT_TYPE = "event_type"

TIMELINE_COLS: List[str] = [
    ENTITY_ID,
    EVENT_DATE,
    EVENT_TYPE,
    "previous_value",
    "current_value",
    "percent_change",
    "is_current",
    "source",
    "record_id",
    "low_confidence",
]

TIMELINE_DTYPES: Dict[str, object] = {
    ENTITY_ID: pd.StringDtype(),
    EVENT_DATE: "datetime64[ns]",
    EVENT_TYPE: pd.StringDtype(),
    "previous_value": "object",
    "current_value": "object",
    "percent_change": pd.Float64Dtype(),
    "is_current": "bool",
    "source": pd.StringDtype(),
    "record_id": pd.StringDtype(),
    "low_confidence": "bool",
}


def event_precedence(event_type: str) -> int:
    """Return the within-date rendering rank for an event type."""
    return EVENT_TYPE_PRECEDENCE.get(event_type, OTHER_EVENT_PRECEDENCE)
