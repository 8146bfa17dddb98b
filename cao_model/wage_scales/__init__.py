"""
CAO wage scale reference data: definitions, dated rates and snapshots.
"""

from .defaults import DEFAULT_RATES, DEFAULT_SCALES
from .loader import (
    default_wage_table,
    load_from_yaml,
    load_rates_from_parquet,
    load_wage_table_from_config,
)
from .models import WageAmounts, WageRate, WageScaleDefinition
from .provider import WageTableProvider, loader_from_path
from .table import WageScaleTable, rates_to_frame

__all__ = [
    "DEFAULT_RATES",
    "DEFAULT_SCALES",
    "WageAmounts",
    "WageRate",
    "WageScaleDefinition",
    "WageScaleTable",
    "WageTableProvider",
    "default_wage_table",
    "load_from_yaml",
    "load_rates_from_parquet",
    "load_wage_table_from_config",
    "loader_from_path",
    "rates_to_frame",
]
