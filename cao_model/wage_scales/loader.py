import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import pandas as pd
import pyarrow.parquet as pq
import yaml
from cerberus import Validator

from cao_model.exceptions import ConfigError
from cao_model.schema import (
    EFFECTIVE_DATE,
    HOURLY_WAGE,
    MONTHLY_WAGE,
    SCALE_NUMBER,
    STEP_NUMBER,
    WAGE_RATE_SCHEMA,
    YEARLY_WAGE,
)

from .defaults import DEFAULT_RATES, DEFAULT_SCALES
from .models import WageScaleDefinition
from .table import WageScaleTable

logger = logging.getLogger(__name__)

_RATE_SCHEMA = {
    "step": {"type": "integer", "required": True},
    "effective_date": {"type": ["date", "string"], "required": True},
    "monthly_wage": {"type": "number", "nullable": True},
    "hourly_wage": {"type": "number", "nullable": True},
    "yearly_wage": {"type": "number", "nullable": True},
}

WAGE_TABLE_SCHEMA: Dict[str, Any] = {
    "version": {"type": "string", "required": False},
    "scales": {
        "type": "list",
        "required": True,
        "schema": {
            "type": "dict",
            "schema": {
                "scale_number": {"type": "integer", "required": True},
                "scale_name": {"type": "string"},
                "scale_category": {"type": "string"},
                "min_step": {"type": "integer", "required": True},
                "max_step": {"type": "integer", "required": True},
                "description": {"type": "string", "nullable": True},
                "is_active": {"type": "boolean"},
                "rates": {"type": "list", "schema": {"type": "dict", "schema": _RATE_SCHEMA}},
            },
        },
    },
}


def _parse_scale(data: Mapping[str, Any]) -> WageScaleDefinition:
    number = int(data["scale_number"])
    return WageScaleDefinition(
        scale_number=number,
        scale_name=data.get("scale_name") or f"Schaal {number}",
        scale_category=data.get("scale_category") or "Unknown",
        min_step=int(data["min_step"]),
        max_step=int(data["max_step"]),
        description=data.get("description") or "",
        is_active=bool(data.get("is_active", True)),
    )


def load_wage_table_from_config(
    config: Dict[str, Any],
    strict_validation: bool = True,
    version: Optional[str] = None,
) -> WageScaleTable:
    """Build a WageScaleTable from a configuration dictionary.

    Expected shape::

        version: "2025-07"
        scales:
          - scale_number: 6
            scale_name: Schaal 6
            scale_category: Vakspecialist niveau 4
            min_step: 10
            max_step: 23
            rates:
              - {step: 10, effective_date: 2025-01-01, monthly_wage: 2790.0}

    Raises:
        ConfigError: If the document does not match the schema, or (in strict
            mode) a scale or rate entry is invalid.
    """
    validator = Validator(WAGE_TABLE_SCHEMA, allow_unknown=not strict_validation)
    if not validator.validate(config):
        raise ConfigError(f"Wage table validation error: {validator.errors}")

    scales: Dict[int, WageScaleDefinition] = {}
    rows: List[Dict[str, Any]] = []
    for data in config.get("scales", []):
        try:
            scale = _parse_scale(data)
        except (TypeError, ValueError, ConfigError) as e:
            msg = f"Invalid data for scale {data.get('scale_number')}: {e}"
            if strict_validation:
                raise ConfigError(msg) from e
            logger.warning(msg)
            continue
        if scale.scale_number in scales:
            msg = f"Duplicate scale definition {scale.scale_number}"
            if strict_validation:
                raise ConfigError(msg)
            logger.warning("%s, keeping the first one", msg)
            continue
        scales[scale.scale_number] = scale
        for rate in data.get("rates", []) or []:
            rows.append(
                {
                    SCALE_NUMBER: scale.scale_number,
                    STEP_NUMBER: int(rate["step"]),
                    EFFECTIVE_DATE: rate["effective_date"],
                    MONTHLY_WAGE: rate.get("monthly_wage"),
                    HOURLY_WAGE: rate.get("hourly_wage"),
                    YEARLY_WAGE: rate.get("yearly_wage"),
                }
            )

    if not scales:
        raise ConfigError("No wage scales found in configuration")

    return WageScaleTable(
        scales,
        pd.DataFrame(rows),
        version=version or config.get("version"),
        loaded_at=datetime.now(),
        strict_validation=strict_validation,
    )


def load_from_yaml(path: Union[str, Path], strict_validation: bool = True) -> WageScaleTable:
    """Load a wage table from a YAML file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except (yaml.YAMLError, OSError) as e:
        msg = f"Error loading wage table from {path}: {e}"
        raise ConfigError(msg) from e
    if not isinstance(config, dict):
        raise ConfigError(f"Invalid wage table format in {path}: Expected a dictionary.")
    table = load_wage_table_from_config(config, strict_validation=strict_validation)
    logger.info("Loaded wage table %s from %s", table.version, path)
    return table


def load_rates_from_parquet(
    path: Union[str, Path],
    scales: Optional[Mapping[int, WageScaleDefinition]] = None,
    strict_validation: bool = True,
    version: Optional[str] = None,
) -> WageScaleTable:
    """Load wage rates from a Parquet file with the wage-rate Arrow schema.

    Args:
        path: Parquet file with one row per (scale, step, effective_date)
        scales: Scale definitions; defaults to the built-in scales
        strict_validation: See WageScaleTable
        version: Snapshot identifier; the content hash is used when omitted
    """
    path = Path(path)
    if not path.exists() or path.stat().st_size == 0:
        raise ConfigError(f"Wage rate file not found or empty: {path}")
    try:
        table = pq.read_table(path, schema=WAGE_RATE_SCHEMA)
    except Exception as e:
        logger.error(f"Error loading wage rates from {path}: {e}", exc_info=True)
        raise ConfigError(f"Error loading wage rates from {path}: {e}") from e
    df = table.to_pandas()
    logger.debug("Loaded %d wage rate rows from %s", len(df), path)
    return WageScaleTable(
        scales if scales is not None else DEFAULT_SCALES,
        df,
        version=version,
        strict_validation=strict_validation,
    )


def default_wage_table() -> WageScaleTable:
    """Wage table built from the built-in scale definitions and rates."""
    return WageScaleTable(DEFAULT_SCALES, DEFAULT_RATES, version="default")
